"""``@References`` block parsing.

A references block lists one entry per ``* id`` line, each followed by
indented ``| key: value`` property lines::

    @References
    * mdn-regex
      | type: web
      | page-title: Regular expressions
      | link: https://developer.mozilla.org/
"""

from __future__ import annotations

import logging
import re

from mml_converter.exceptions import InvalidReference
from mml_converter.ir.schema import Reference, ReferenceKind

logger = logging.getLogger(__name__)

_ENTRY_RE = re.compile(
    r"^[ \t]*\*[ \t]*(?P<id>[\w\-]+)"
    r"(?P<props>(?:[ \t]*\|[^\n]*)?(?:\n[ \t]*\|[^\n]*|\n(?:[ \t]*\n)+[ \t]*\|[ \t]*[\w\-]+:[^\n]*)*)",
    re.M,
)
_PROP_RE = re.compile(r"\|[ \t]*(?P<key>[\w\-]+):[ \t]*(?P<value>[^\n|]*)")


def parse_references(body: str, first_ordinal: int = 1) -> list[Reference]:
    """Parse the entries of a references block.

    Ordinals are assigned in definition order starting at ``first_ordinal``.
    The ``type`` property selects the reference kind; unknown types become
    ``ReferenceKind.OTHER``.
    """
    references: list[Reference] = []
    for offset, entry in enumerate(_ENTRY_RE.finditer(body)):
        fields: dict[str, str] = {}
        for prop in _PROP_RE.finditer(entry.group("props")):
            fields[prop.group("key")] = prop.group("value").strip()

        kind_name = fields.pop("type", ReferenceKind.OTHER.value)
        try:
            kind = ReferenceKind(kind_name)
        except ValueError:
            logger.debug("Reference %s has unknown type %r", entry.group("id"), kind_name)
            kind = ReferenceKind.OTHER

        references.append(
            Reference(
                id=entry.group("id"),
                ordinal=first_ordinal + offset,
                kind=kind,
                fields=fields,
            )
        )
    return references


def merge_references(
    existing: dict[str, Reference], new: list[Reference]
) -> dict[str, Reference]:
    """Add ``new`` references to ``existing``; ids must be unique per document."""
    for reference in new:
        if reference.id in existing:
            raise InvalidReference(reference.id, "duplicate reference id")
        existing[reference.id] = reference
    return existing
