"""Tests for Config loading, defaults and the article index."""

import pytest

from mml_converter.config import Config, article_uri, load_article_index
from mml_converter.exceptions import ConfigError


class TestConfigDefaults:
    def test_default_config(self):
        cfg = Config.default()
        assert cfg.verbose is False
        assert cfg.parser.engine == "mml"
        assert cfg.parser.verbatim_tags == ["pre", "script", "style"]
        assert cfg.html.toc_title == "Table of Contents"
        assert cfg.html.bibliography_title == "Bibliography"
        assert cfg.html.highlight_code is True
        assert cfg.style.heading_prefix == "Heading"
        assert cfg.style.code_font == "Courier New"

    def test_load_none_returns_default(self):
        cfg = Config.load(None)
        assert cfg.parser.engine == "mml"

    def test_defaults_are_not_shared(self):
        a = Config.default()
        b = Config.default()
        a.parser.verbatim_tags.append("raw")
        assert "raw" not in b.parser.verbatim_tags


class TestConfigFromYAML:
    def test_full_yaml(self):
        yaml_text = """\
verbose: true
parser:
  engine: mml
  verbatim_tags: [pre, raw]
html:
  toc_title: Contents
  bibliography_title: Sources
  highlight_code: false
  link_target: ""
  back_to_top: false
style:
  heading_prefix: "H"
  quote_style: "Intense Quote"
"""
        cfg = Config.from_yaml_string(yaml_text)
        assert cfg.verbose is True
        assert cfg.parser.verbatim_tags == ["pre", "raw"]
        assert cfg.html.toc_title == "Contents"
        assert cfg.html.bibliography_title == "Sources"
        assert cfg.html.highlight_code is False
        assert cfg.html.link_target == ""
        assert cfg.html.back_to_top is False
        assert cfg.style.heading_prefix == "H"
        assert cfg.style.quote_style == "Intense Quote"

    def test_partial_yaml_uses_defaults(self):
        cfg = Config.from_yaml_string("html:\n  toc_title: Contents\n")
        assert cfg.html.toc_title == "Contents"
        # Defaults for everything else
        assert cfg.html.bibliography_title == "Bibliography"
        assert cfg.style.body_style == "Normal"
        assert cfg.parser.engine == "mml"

    def test_empty_yaml(self):
        cfg = Config.from_yaml_string("")
        assert cfg.verbose is False
        assert cfg.parser.engine == "mml"

    def test_invalid_yaml_raises(self):
        with pytest.raises(ConfigError):
            Config.from_yaml_string("{{invalid yaml::")

    def test_non_mapping_raises(self):
        with pytest.raises(ConfigError, match="mapping"):
            Config.from_yaml_string("- a\n- b\n")

    def test_unknown_keys_ignored(self):
        yaml_text = """\
html:
  toc_title: T
  future_setting: true
parser:
  engine: mml
  strict: yes
"""
        cfg = Config.from_yaml_string(yaml_text)
        assert cfg.html.toc_title == "T"
        assert cfg.parser.engine == "mml"


class TestConfigFromFile:
    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            Config.from_yaml(tmp_path / "nonexistent.yaml")

    def test_load_from_file(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("verbose: true\nhtml:\n  toc_title: Index\n")
        cfg = Config.load(config_file)
        assert cfg.verbose is True
        assert cfg.html.toc_title == "Index"


class TestArticleIndex:
    def test_article_uri(self):
        assert article_uri("intro") == "/intro.html"
        assert article_uri("series:part-2") == "/series/part-2.html"

    def test_load_index(self, tmp_path):
        index_file = tmp_path / "articles.yaml"
        index_file.write_text(
            "intro: Introduction\n"
            "series:part-2:\n"
            "  title: Part Two\n"
            "custom:\n"
            "  title: Custom\n"
            "  uri: https://example.org/custom\n"
        )
        index = load_article_index(index_file)
        assert index["intro"].title == "Introduction"
        assert index["intro"].uri == "/intro.html"
        assert index["series:part-2"].uri == "/series/part-2.html"
        assert index["custom"].uri == "https://example.org/custom"

    def test_missing_index(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_article_index(tmp_path / "none.yaml")

    def test_entry_without_title(self, tmp_path):
        index_file = tmp_path / "articles.yaml"
        index_file.write_text("intro:\n  uri: /x.html\n")
        with pytest.raises(ConfigError, match="needs a title"):
            load_article_index(index_file)

    def test_index_must_be_mapping(self, tmp_path):
        index_file = tmp_path / "articles.yaml"
        index_file.write_text("- intro\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_article_index(index_file)
