"""Table rendering for python-docx.

Rows of a parsed table may have different lengths; the Word table gets as
many columns as the widest row and shorter rows leave trailing cells empty.
"""

from __future__ import annotations

from typing import Callable

from docx.document import Document
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.table import Table, _Cell

from mml_converter.config import StyleConfig
from mml_converter.ir.schema import Cell
from mml_converter.ir.schema import Table as TableNode

CellWriter = Callable[[_Cell, Cell], None]


def build_table(
    doc: Document, node: TableNode, style: StyleConfig, write_cell: CellWriter
) -> Table:
    """Create a python-docx Table from a parsed table.

    Args:
        doc: The python-docx Document to add the table to.
        node: The parsed table, head row first.
        style: Style configuration.
        write_cell: Fills a Word cell with the content of a parsed cell.

    Returns:
        The created Table object.
    """
    rows = [node.head] + list(node.rows)
    num_cols = max((len(row) for row in rows), default=0)

    if num_cols == 0:
        # Empty table: add a minimal 1x1 placeholder
        return doc.add_table(rows=1, cols=1, style=style.table_style)

    table = doc.add_table(rows=len(rows), cols=num_cols, style=style.table_style)

    for r, row in enumerate(rows):
        for c, cell_data in enumerate(row):
            write_cell(table.cell(r, c), cell_data)

    _mark_head_row(table)
    _stretch_to_page(table)

    return table


def _mark_head_row(table: Table) -> None:
    """Bold the head cells and repeat the head row on every page."""
    head = table.rows[0]
    for cell in head.cells:
        for paragraph in cell.paragraphs:
            for run in paragraph.runs:
                run.bold = True

    trPr = head._tr.get_or_add_trPr()
    if trPr.find(qn("w:tblHeader")) is None:
        trPr.append(OxmlElement("w:tblHeader"))


def _stretch_to_page(table: Table) -> None:
    """Make the table span the full text width.

    The ``w:tblW`` python-docx writes is updated in place; a table carries
    at most one.
    """
    tblPr = table._tbl.tblPr
    tblW = tblPr.find(qn("w:tblW"))
    if tblW is None:
        tblW = OxmlElement("w:tblW")
        tblPr.append(tblW)
    tblW.set(qn("w:type"), "pct")
    tblW.set(qn("w:w"), "5000")  # fiftieths of a percent
