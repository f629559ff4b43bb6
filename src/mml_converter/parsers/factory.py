"""Parser factory — selects a parser implementation based on config."""

from __future__ import annotations

from mml_converter.config import Config
from mml_converter.exceptions import ConfigError
from mml_converter.parsers.base import BaseParser


def create_parser(config: Config | None = None) -> BaseParser:
    """Create a parser instance based on config.

    Args:
        config: Converter configuration. Uses default if None.

    Returns:
        A BaseParser implementation.

    Raises:
        ConfigError: If the configured engine is unknown.
    """
    config = config or Config.default()
    engine = config.parser.engine.lower()

    if engine == "mml":
        from mml_converter.parsers.mml_parser import MmlParser

        return MmlParser(config)
    else:
        raise ConfigError(
            f"Unknown parser engine: '{engine}'. Available: mml"
        )
