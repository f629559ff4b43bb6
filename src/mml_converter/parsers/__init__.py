"""MML parser implementations."""

from mml_converter.parsers.base import BaseParser
from mml_converter.parsers.factory import create_parser

__all__ = ["BaseParser", "create_parser"]
