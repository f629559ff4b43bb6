"""Tree traversal helpers shared by the TOC builder, bibliography and report."""

from __future__ import annotations

from typing import Iterable, Iterator

from mml_converter.ir.schema import (
    CodeBlock,
    InlineCode,
    Link,
    List,
    Math,
    Node,
    Table,
    Text,
)


def child_nodes(node: Node) -> list[Node]:
    """Return the direct children of a node, whatever its type."""
    if isinstance(node, List):
        return list(node.items)
    if isinstance(node, Table):
        cells = list(node.head)
        for row in node.rows:
            cells.extend(row)
        return cells
    return list(getattr(node, "children", None) or [])


def iter_nodes(nodes: Iterable[Node]) -> Iterator[Node]:
    """Depth-first, document-order traversal of every node in the tree."""
    for node in nodes:
        yield node
        yield from iter_nodes(child_nodes(node))


def plain_text(nodes: Iterable[Node]) -> str:
    """Concatenate the visible text of a node sequence."""
    parts: list[str] = []
    for node in nodes:
        if isinstance(node, Text):
            parts.append(node.text)
        elif isinstance(node, (CodeBlock, InlineCode)):
            parts.append(node.raw)
        elif isinstance(node, Link):
            parts.append(node.text)
        elif isinstance(node, Math):
            parts.append(node.equation)
        else:
            parts.append(plain_text(child_nodes(node)))
    return "".join(parts)
