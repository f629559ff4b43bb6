"""Exception hierarchy for the MML converter."""

from __future__ import annotations

from typing import Optional

_CONTEXT_RADIUS = 20


class MmlConverterError(Exception):
    """Base exception for all mml-converter errors."""


class ParseError(MmlConverterError):
    """Raised when MML source cannot be parsed.

    Carries the offending offset into the document source together with a
    1-based line/column and a short snippet of surrounding text.
    """

    def __init__(
        self,
        message: str,
        offset: Optional[int] = None,
        source: Optional[str] = None,
    ):
        self.reason = message
        self.offset = offset
        self.source = source
        self.line: Optional[int] = None
        self.column: Optional[int] = None
        self.context = ""

        if offset is not None and source is not None:
            offset = max(0, min(offset, len(source)))
            self.line = source.count("\n", 0, offset) + 1
            self.column = offset - (source.rfind("\n", 0, offset) + 1) + 1
            lo = max(0, offset - _CONTEXT_RADIUS)
            hi = min(len(source), offset + _CONTEXT_RADIUS)
            self.context = source[lo:hi]

        super().__init__(self._format())

    def _format(self) -> str:
        if self.line is None:
            return self.reason
        return (
            f"{self.reason} (line {self.line}, column {self.column}, "
            f"offset {self.offset}) near {self.context!r}"
        )


class UnterminatedConstruct(ParseError):
    """A tag, brace, quote, fence or custom delimiter was never closed."""


class MalformedTable(ParseError):
    """A table row could not be split into cells."""


class MalformedElementAttributes(ParseError):
    """A tagged element's attribute segment is not a list of name=value pairs."""


class TocError(MmlConverterError):
    """Raised when the table of contents cannot be built."""


class InvalidHeaderLevel(TocError):
    """A header level cannot be related to any open TOC ancestor."""


class BibliographyError(MmlConverterError):
    """Raised when citations or references cannot be resolved."""


class UnknownReference(BibliographyError):
    """A citation names a reference id that was never defined."""

    def __init__(self, ref_id: str):
        self.ref_id = ref_id
        super().__init__(f"Unknown reference: '{ref_id}'")


class InvalidReference(BibliographyError):
    """A bibliography entry is missing required fields or is duplicated."""

    def __init__(self, ref_id: str, reason: str):
        self.ref_id = ref_id
        self.reason = reason
        super().__init__(f"Invalid reference '{ref_id}': {reason}")


class GenerationError(MmlConverterError):
    """Raised when output generation fails."""


class UnresolvedObjectLink(GenerationError):
    """An object link names an article id absent from the article index."""

    def __init__(self, ref_id: str):
        self.ref_id = ref_id
        super().__init__(f"Invalid article id: '{ref_id}'")


class ConfigError(MmlConverterError):
    """Raised when configuration is invalid or missing."""
