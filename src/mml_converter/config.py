"""YAML-backed configuration for the MML converter."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from mml_converter.exceptions import ConfigError
from mml_converter.ir.schema import ArticleRef


@dataclass
class ParserConfig:
    """Parser selection and options."""

    engine: str = "mml"
    # Tagged elements whose content is kept verbatim instead of re-parsed
    verbatim_tags: list[str] = field(default_factory=lambda: ["pre", "script", "style"])


@dataclass
class HtmlConfig:
    """HTML renderer settings."""

    toc_title: str = "Table of Contents"
    bibliography_title: str = "Bibliography"
    highlight_code: bool = True
    inline_code_language: Optional[str] = None
    link_target: str = "_blank"
    back_to_top: bool = True


@dataclass
class StyleConfig:
    """Word document style mappings."""

    heading_prefix: str = "Heading"  # e.g. "Heading 1", "Heading 2"
    body_style: str = "Normal"
    list_bullet_style: str = "List Bullet"
    list_number_style: str = "List Number"
    table_style: str = "Table Grid"
    quote_style: str = "Quote"
    code_font: str = "Courier New"


@dataclass
class Config:
    """Top-level converter configuration."""

    parser: ParserConfig = field(default_factory=ParserConfig)
    html: HtmlConfig = field(default_factory=HtmlConfig)
    style: StyleConfig = field(default_factory=StyleConfig)
    verbose: bool = False

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        """Load configuration from a YAML file."""
        try:
            text = path.read_text(encoding="utf-8")
            data = yaml.safe_load(text) or {}
        except FileNotFoundError:
            raise ConfigError(f"Config file not found: {path}")
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}")

        return cls._from_dict(data)

    @classmethod
    def from_yaml_string(cls, text: str) -> Config:
        """Load configuration from a YAML string."""
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML: {exc}")
        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict) -> Config:
        if not isinstance(data, dict):
            raise ConfigError("Configuration must be a mapping")

        parser_data = data.get("parser", {})
        html_data = data.get("html", {})
        style_data = data.get("style", {})

        return cls(
            parser=ParserConfig(**{k: v for k, v in parser_data.items() if k in ParserConfig.__dataclass_fields__}),
            html=HtmlConfig(**{k: v for k, v in html_data.items() if k in HtmlConfig.__dataclass_fields__}),
            style=StyleConfig(**{k: v for k, v in style_data.items() if k in StyleConfig.__dataclass_fields__}),
            verbose=data.get("verbose", False),
        )

    @classmethod
    def default(cls) -> Config:
        """Return the default configuration."""
        return cls()

    @classmethod
    def load(cls, path: Optional[Path] = None) -> Config:
        """Load config from path, or return defaults if path is None."""
        if path is None:
            return cls.default()
        return cls.from_yaml(path)


def article_uri(article_id: str) -> str:
    """Default site URI for an article id; ``:`` separates path segments."""
    return "/" + "/".join(f"{article_id}.html".split(":"))


def load_article_index(path: Path) -> dict[str, ArticleRef]:
    """Load the cross-document article index from YAML.

    The file maps article ids to either a title string or a mapping with
    ``title`` and an optional ``uri``::

        intro: Introduction to MML
        series:part-2:
          title: Part Two
          uri: /series/part-2.html
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except FileNotFoundError:
        raise ConfigError(f"Article index not found: {path}")
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}")

    if not isinstance(data, dict):
        raise ConfigError(f"Article index must be a mapping: {path}")

    index: dict[str, ArticleRef] = {}
    for article_id, entry in data.items():
        article_id = str(article_id)
        if isinstance(entry, str):
            index[article_id] = ArticleRef(id=article_id, title=entry, uri=article_uri(article_id))
        elif isinstance(entry, dict) and "title" in entry:
            index[article_id] = ArticleRef(
                id=article_id,
                title=str(entry["title"]),
                uri=str(entry.get("uri") or article_uri(article_id)),
            )
        else:
            raise ConfigError(f"Article '{article_id}' needs a title in {path}")
    return index
