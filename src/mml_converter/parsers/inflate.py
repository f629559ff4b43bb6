"""Tree inflation: group flat parser output into paragraphs."""

from __future__ import annotations

from mml_converter.ir.schema import (
    BlockQuote,
    CodeBlock,
    Header,
    List,
    ListItem,
    Node,
    Paragraph,
    ParagraphBreak,
    Table,
    TableOfContents,
)
from mml_converter.ir.walk import child_nodes

# Nodes that close the open paragraph and stand on their own.
# BlockQuote is absent: it is pushed into the current paragraph.
STRUCTURAL_TYPES = (Header, List, ListItem, Table, CodeBlock, TableOfContents, ParagraphBreak, Paragraph)


def inflate(nodes: list[Node]) -> list[Node]:
    """Group consecutive inline nodes into paragraphs.

    Structural nodes close the open paragraph (an empty one is dropped) and
    are emitted in their own right; paragraph breaks only close. Every
    emitted node has its own children inflated, with any paragraphs formed
    inside them unwrapped back into inline content.
    """
    result: list[Node] = []
    paragraph = Paragraph()

    for node in nodes:
        if isinstance(node, STRUCTURAL_TYPES):
            if paragraph.children:
                result.append(paragraph)
                paragraph = Paragraph()
            if isinstance(node, ParagraphBreak):
                continue
            _inflate_children(node)
            result.append(node)
        else:
            _inflate_children(node)
            paragraph.children.append(node)

    if paragraph.children:
        result.append(paragraph)
    return result


def inflate_inline(nodes: list[Node]) -> list[Node]:
    """Inflate, then unwrap paragraphs into their content."""
    flattened: list[Node] = []
    for node in inflate(nodes):
        if isinstance(node, Paragraph):
            flattened.extend(node.children)
        else:
            flattened.append(node)
    return flattened


def _inflate_children(node: Node) -> None:
    if isinstance(node, List):
        for item in node.items:
            item.children = inflate_inline(item.children)
    elif isinstance(node, Table):
        for cell in child_nodes(node):
            cell.children = inflate_inline(cell.children)
    elif isinstance(node, BlockQuote) or getattr(node, "children", None):
        node.children = inflate_inline(node.children)
