"""Table-of-contents construction from document headers."""

from __future__ import annotations

import logging
import re
from typing import Iterable

from mml_converter.exceptions import InvalidHeaderLevel
from mml_converter.ir.schema import Document, Header, Node, Section, TocNode
from mml_converter.ir.walk import iter_nodes, plain_text

logger = logging.getLogger(__name__)

BIBLIOGRAPHY_ANCHOR = "bibliography"

_ANCHOR_UNSAFE_RE = re.compile(r"[^a-zA-Z0-9_]")


def header_anchor(title: str, ordinal: int) -> str:
    """Anchor id for a header; the ordinal keeps repeated titles distinct."""
    return f"{_ANCHOR_UNSAFE_RE.sub('-', title).lower()}-{ordinal}"


def collect_sections(nodes: Iterable[Node]) -> list[Section]:
    """Return one Section per Header, in document order.

    Headers nested anywhere in the tree (element content, block quotes,
    table cells) are included.
    """
    return [
        Section(title=plain_text(node.children).strip(), level=node.level, ordinal=node.ordinal)
        for node in iter_nodes(nodes)
        if isinstance(node, Header)
    ]


def build_section_tree(
    sections: Iterable[Section],
    with_bibliography: bool = False,
    bibliography_title: str = "Bibliography",
) -> TocNode:
    """Nest sections under a synthetic level-0 root by header level.

    A deeper section becomes a child of the one before it; otherwise open
    sections are closed until a strictly lower level is on top. Skipped
    levels simply nest.

    Raises:
        InvalidHeaderLevel: No open ancestor has a lower level than the
            section (its level is not positive).
    """
    root = TocNode(level=0)
    stack: list[TocNode] = [root]

    for section in sections:
        while stack and stack[-1].level >= section.level:
            stack.pop()
        if not stack:
            raise InvalidHeaderLevel(
                f"Invalid header level {section.level} for '{section.title}'"
            )
        node = TocNode(
            level=section.level,
            anchor_id=header_anchor(section.title, section.ordinal),
            title=section.title,
        )
        stack[-1].children.append(node)
        stack.append(node)

    if with_bibliography:
        root.children.append(
            TocNode(level=1, anchor_id=BIBLIOGRAPHY_ANCHOR, title=bibliography_title)
        )
    return root


def build_toc(document: Document, bibliography_title: str = "Bibliography") -> TocNode:
    """Build the TOC tree of a parsed document.

    A trailing bibliography leaf is added when the document defines any
    reference.
    """
    toc = build_section_tree(
        document.sections,
        with_bibliography=bool(document.references),
        bibliography_title=bibliography_title,
    )
    logger.debug("Built TOC with %d sections", len(document.sections))
    return toc
