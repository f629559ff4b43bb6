"""List and table reconstruction.

The parser emits list items as a flat run of ``ListItem`` candidates, each
carrying its ordered flag and leading-whitespace length. ``reconstruct_lists``
turns every such run into nested ``List`` trees. Tables arrive as a run of
source lines that ``build_table`` splits into cells.
"""

from __future__ import annotations

import re
from typing import Callable, Sequence

from mml_converter.exceptions import MalformedTable
from mml_converter.ir.schema import Cell, List, ListItem, Node, Table
from mml_converter.parsers.escapes import find_unescaped

_CELL_ESCAPE_RE = re.compile(r"\\([|\\n])")


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------


def build_list(items: Sequence[ListItem], start: int = 0) -> tuple[List, int]:
    """Build a list from the run of candidates beginning at ``items[start]``.

    Items at the first item's indentation with the same ordered flag are
    siblings. A deeper item starts a nested list (built the same way) that
    is appended to the current item's children. A shallower item, or a
    sibling-depth item with a different ordered flag, ends the list.

    Returns:
        The built list and the number of candidates it consumed.
    """
    first = items[start]
    result = List(ordered=first.ordered, items=[first])
    current = first

    i = start + 1
    while i < len(items):
        item = items[i]
        if item.indent > first.indent:
            nested, consumed = build_list(items, i)
            current.children.append(nested)
            i += consumed
        elif item.indent < first.indent or item.ordered != first.ordered:
            break
        else:
            result.items.append(item)
            current = item
            i += 1

    return result, i - start


def reconstruct_lists(nodes: list[Node]) -> list[Node]:
    """Replace every run of ``ListItem`` candidates with ``List`` trees.

    Recurses into the children of every node, so list items inside block
    quotes, elements and table cells are grouped too.
    """
    result: list[Node] = []
    i = 0
    while i < len(nodes):
        node = nodes[i]
        if not isinstance(node, ListItem):
            _reconstruct_children(node)
            result.append(node)
            i += 1
            continue

        run_end = i
        while run_end < len(nodes) and isinstance(nodes[run_end], ListItem):
            run_end += 1
        run = nodes[i:run_end]

        j = 0
        while j < len(run):
            built, consumed = build_list(run, j)
            _reconstruct_children(built)
            result.append(built)
            j += consumed
        i = run_end
    return result


def _reconstruct_children(node: Node) -> None:
    if isinstance(node, List):
        for item in node.items:
            item.children = reconstruct_lists(item.children)
    elif isinstance(node, Table):
        for cell in node.head:
            cell.children = reconstruct_lists(cell.children)
        for row in node.rows:
            for cell in row:
                cell.children = reconstruct_lists(cell.children)
    elif getattr(node, "children", None):
        node.children = reconstruct_lists(node.children)


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


def unescape_cell(text: str) -> str:
    """Unescape ``\\|``, ``\\\\`` and ``\\n`` inside a table cell."""
    return _CELL_ESCAPE_RE.sub(lambda m: "\n" if m.group(1) == "n" else m.group(1), text)


def split_row(line: str) -> list[str]:
    """Split a ``| a | b |`` row on unescaped pipes into trimmed cell texts.

    The trailing pipe is optional; rows are split independently, so column
    counts may differ between rows.
    """
    stripped = line.strip()
    if not stripped.startswith("|"):
        raise MalformedTable(f"Table row must start with '|': {line!r}")

    cells: list[str] = []
    pos = 1
    while True:
        idx = find_unescaped(stripped, "|", pos, len(stripped))
        if idx == -1:
            tail = stripped[pos:]
            if tail.strip():
                cells.append(tail)
            break
        cells.append(stripped[pos:idx])
        pos = idx + 1
    return [cell.strip() for cell in cells]


def build_table(
    text: str,
    rows: Sequence[tuple[int, int]],
    parse_cell: Callable[[str], list[Node]],
) -> Table:
    """Build a table from source line spans (head row first).

    Each cell is unescaped and handed to ``parse_cell`` for recursive parsing.
    """
    if len(rows) < 2:
        offset = rows[0][0] if rows else None
        raise MalformedTable("Table has no body rows", offset=offset, source=text)

    def cells_of(span: tuple[int, int]) -> list[Cell]:
        start, end = span
        try:
            texts = split_row(text[start:end])
        except MalformedTable as exc:
            raise MalformedTable(exc.reason, offset=start, source=text) from exc
        return [Cell(children=parse_cell(unescape_cell(t))) for t in texts]

    head = cells_of(rows[0])
    body = [cells_of(span) for span in rows[1:]]
    return Table(head=head, rows=body)
