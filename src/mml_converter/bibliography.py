"""Citation resolution and IEEE-style bibliography formatting.

Entries are numbered by their position in the ``@References`` blocks
(definition order), not by first citation in the text.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from mml_converter.exceptions import InvalidReference, UnknownReference
from mml_converter.ir.schema import (
    BibliographyEntry,
    Citation,
    Document,
    EntrySegment,
    Reference,
    ReferenceKind,
)
from mml_converter.ir.walk import iter_nodes

logger = logging.getLogger(__name__)


def reference_anchor(ref_id: str) -> str:
    """Anchor id of a bibliography entry; in-text citations link here."""
    return f"bib-ref-{ref_id}"


def citation_label(reference: Reference) -> str:
    return f"[{reference.ordinal}]"


def resolve(
    references: dict[str, Reference],
    citations: Iterable[str],
) -> list[BibliographyEntry]:
    """Check every citation resolves and format all references.

    Args:
        references: The document's reference table, keyed by id.
        citations: Cited reference ids, in document order.

    Returns:
        One formatted entry per reference, in ordinal order.

    Raises:
        UnknownReference: A citation names an undefined reference.
        InvalidReference: A reference lacks a link or identifying fields,
            or its type cannot be formatted.
    """
    for ref_id in citations:
        if ref_id not in references:
            raise UnknownReference(ref_id)

    entries = [
        format_reference(reference)
        for reference in sorted(references.values(), key=lambda r: r.ordinal)
    ]
    logger.debug("Resolved %d bibliography entries", len(entries))
    return entries


def resolve_document(document: Document) -> list[BibliographyEntry]:
    """Resolve the citations found anywhere in a document's tree."""
    citations = [
        node.ref_id for node in iter_nodes(document.children) if isinstance(node, Citation)
    ]
    return resolve(document.references, citations)


def format_reference(reference: Reference) -> BibliographyEntry:
    """Format one reference according to its kind."""
    href = reference.fields.get("link") or reference.fields.get("webarchive")
    if not href:
        raise InvalidReference(reference.id, "missing link")

    if reference.kind == ReferenceKind.WEB:
        segments = _web_segments(reference, href)
    elif reference.kind == ReferenceKind.GOV_PUB:
        segments = _gov_pub_segments(reference, href)
    else:
        raise InvalidReference(reference.id, f"cannot format reference type '{reference.kind.value}'")

    return BibliographyEntry(
        ref_id=reference.id,
        ordinal=reference.ordinal,
        kind=reference.kind,
        anchor_id=reference_anchor(reference.id),
        href=href,
        segments=[EntrySegment(role="ordinal", text=citation_label(reference))] + segments,
    )


def _field(reference: Reference, *names: str) -> str:
    for name in names:
        value = reference.fields.get(name, "").strip()
        if value:
            return value
    return ""


def _sentence(role: str, text: str) -> Optional[EntrySegment]:
    if not text:
        return None
    return EntrySegment(role=role, text=text if text.endswith(".") else f"{text}.")


def _web_segments(reference: Reference, href: str) -> list[EntrySegment]:
    names = _field(reference, "names")
    page_title = _field(reference, "page-title")
    website_title = _field(reference, "website-title")
    access_date = _field(reference, "access-date")
    if not (names or page_title or website_title):
        raise InvalidReference(
            reference.id, "web reference needs names, a page title or a website title"
        )

    segments = [
        _sentence("names", names),
        _sentence("title", page_title),
        _sentence("website", website_title),
        EntrySegment(role="online", text="[Online]."),
        EntrySegment(role="link", text=f"Available: {href}."),
        _sentence("accessed", f"Accessed {access_date}" if access_date else ""),
    ]
    return [segment for segment in segments if segment is not None]


def _gov_pub_segments(reference: Reference, href: str) -> list[EntrySegment]:
    author = _field(reference, "author")
    agency = _field(reference, "agency")
    title = _field(reference, "title")
    if not (author or agency or title):
        raise InvalidReference(
            reference.id, "government publication needs an author, an agency or a title"
        )

    publication = ", ".join(
        part for part in (title, _field(reference, "pub-loc", "place"), _field(reference, "year"))
        if part
    )
    pages = _field(reference, "pages")
    available = " ".join(part for part in (_field(reference, "document-id"), href) if part)

    segments = [
        _sentence("author", author),
        _sentence("agency", agency),
        _sentence("title", publication),
        EntrySegment(role="online", text="[Online]."),
        _sentence("pages", f"Pages {pages}" if pages else ""),
        EntrySegment(role="link", text=f"Available: {available}."),
    ]
    return [segment for segment in segments if segment is not None]
