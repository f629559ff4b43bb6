"""Output renderers for parsed MML documents."""

from __future__ import annotations

from typing import Optional

from mml_converter.config import Config
from mml_converter.exceptions import ConfigError
from mml_converter.ir.schema import ArticleRef
from mml_converter.renderers.base import BaseRenderer

RENDERER_FORMATS = ("html", "docx")


def create_renderer(
    target_format: str,
    config: Optional[Config] = None,
    articles: Optional[dict[str, ArticleRef]] = None,
) -> BaseRenderer:
    """Create a renderer for an output format.

    Args:
        target_format: 'html' or 'docx'.
        config: Converter configuration. Uses default if None.
        articles: Article index used to resolve object links.

    Raises:
        ConfigError: If the format is unknown.
    """
    fmt = target_format.lower()
    if fmt == "html":
        from mml_converter.renderers.html_renderer import HtmlRenderer

        return HtmlRenderer(config, articles)
    elif fmt == "docx":
        from mml_converter.renderers.word_renderer import WordRenderer

        return WordRenderer(config, articles)
    else:
        raise ConfigError(
            f"Unknown output format: '{target_format}'. Available: {', '.join(RENDERER_FORMATS)}"
        )


__all__ = ["BaseRenderer", "RENDERER_FORMATS", "create_renderer"]
