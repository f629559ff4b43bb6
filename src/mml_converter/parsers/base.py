"""Abstract base class for MML parsers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from mml_converter.config import Config
from mml_converter.exceptions import ParseError
from mml_converter.ir.schema import Document


class BaseParser(ABC):
    """Base class that all parser implementations must extend."""

    def __init__(self, config: Config | None = None):
        self.config = config or Config.default()

    @abstractmethod
    def parse(self, text: str) -> Document:
        """Parse MML source text and return its document tree.

        Args:
            text: The complete source of one document.

        Returns:
            The parsed, immutable Document.

        Raises:
            ParseError: If the source is malformed.
        """

    def parse_file(self, path: Path) -> Document:
        """Read a UTF-8 source file and parse it."""
        try:
            text = Path(path).read_text(encoding="utf-8")
        except FileNotFoundError:
            raise ParseError(f"Source file not found: {path}")
        except UnicodeDecodeError as exc:
            raise ParseError(f"Source file is not valid UTF-8: {path}: {exc}") from exc
        return self.parse(text)

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the parser engine name (e.g. 'mml')."""

    @property
    @abstractmethod
    def version(self) -> str:
        """Return the parser version string."""
