"""Tests for list reconstruction, table row splitting and tree inflation."""

import pytest

from mml_converter.exceptions import MalformedTable
from mml_converter.ir.schema import (
    BlockQuote,
    Bold,
    Cell,
    CodeBlock,
    Element,
    Header,
    List,
    ListItem,
    Paragraph,
    ParagraphBreak,
    Table,
    Text,
)
from mml_converter.parsers.inflate import inflate, inflate_inline
from mml_converter.parsers.reconstruct import (
    build_list,
    build_table,
    reconstruct_lists,
    split_row,
    unescape_cell,
)


def _item(text, indent=0, ordered=False):
    return ListItem(ordered=ordered, indent=indent, children=[Text(text=text)])


def _texts(lst):
    return [item.children[0].text for item in lst.items]


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------

class TestBuildList:
    def test_flat_run(self):
        lst, consumed = build_list([_item("a"), _item("b"), _item("c")])
        assert consumed == 3
        assert _texts(lst) == ["a", "b", "c"]

    def test_deeper_items_nest_under_previous_sibling(self):
        items = [_item("a"), _item("b"), _item("c", 2), _item("d", 2), _item("e")]
        lst, consumed = build_list(items)
        assert consumed == 5
        assert _texts(lst) == ["a", "b", "e"]
        nested = lst.items[1].children[-1]
        assert isinstance(nested, List)
        assert _texts(nested) == ["c", "d"]
        assert lst.items[0].children == [Text(text="a")]

    def test_deeply_nested(self):
        items = [_item("a"), _item("b", 2), _item("c", 4)]
        lst, _ = build_list(items)
        level2 = lst.items[0].children[-1]
        level3 = level2.items[0].children[-1]
        assert _texts(level3) == ["c"]

    def test_shallower_item_ends_list(self):
        items = [_item("a", 2), _item("b", 0)]
        lst, consumed = build_list(items)
        assert consumed == 1
        assert _texts(lst) == ["a"]

    def test_ordered_mismatch_ends_list(self):
        items = [_item("a"), _item("b", ordered=True)]
        lst, consumed = build_list(items)
        assert consumed == 1

    def test_nested_list_may_differ_in_kind(self):
        items = [_item("a"), _item("1", 2, ordered=True)]
        lst, consumed = build_list(items)
        assert consumed == 2
        assert lst.items[0].children[-1].ordered

    def test_start_offset(self):
        items = [_item("x", ordered=True), _item("a"), _item("b")]
        lst, consumed = build_list(items, 1)
        assert consumed == 2
        assert _texts(lst) == ["a", "b"]


class TestReconstructLists:
    def test_replaces_runs(self):
        nodes = [Paragraph(), _item("a"), _item("b"), Header(level=1), _item("c")]
        result = reconstruct_lists(nodes)
        assert [type(n) for n in result] == [Paragraph, List, Header, List]

    def test_one_run_may_yield_several_lists(self):
        result = reconstruct_lists([_item("a"), _item("b", ordered=True)])
        assert [n.ordered for n in result] == [False, True]

    def test_recurses_into_containers(self):
        quote = BlockQuote(children=[_item("a"), _item("b")])
        table = Table(head=[Cell(children=[_item("h")])], rows=[[Cell(children=[_item("x")])]])
        reconstruct_lists([quote, table])
        assert isinstance(quote.children[0], List)
        assert isinstance(table.head[0].children[0], List)
        assert isinstance(table.rows[0][0].children[0], List)

    def test_every_item_is_kept(self):
        items = [_item(str(i), indent) for i, indent in enumerate([0, 4, 2, 6, 0, 2])]
        result = reconstruct_lists(items)

        def count(nodes):
            total = 0
            for node in nodes:
                if isinstance(node, List):
                    for item in node.items:
                        total += 1 + count(item.children)
            return total

        assert count(result) == 6


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

class TestSplitRow:
    def test_basic(self):
        assert split_row("| a | b |") == ["a", "b"]

    def test_trailing_pipe_optional(self):
        assert split_row("| a | b") == ["a", "b"]

    def test_escaped_pipe(self):
        assert split_row("| a \\| b | c |") == ["a \\| b", "c"]

    def test_empty_cells(self):
        assert split_row("| | x |") == ["", "x"]

    def test_leading_whitespace(self):
        assert split_row("   | a |") == ["a"]

    def test_must_start_with_pipe(self):
        with pytest.raises(MalformedTable):
            split_row("a | b |")


class TestUnescapeCell:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("a \\| b", "a | b"),
            ("x\\ny", "x\ny"),
            ("back\\\\slash", "back\\slash"),
            ("keep \\* this", "keep \\* this"),
        ],
    )
    def test_unescape(self, raw, expected):
        assert unescape_cell(raw) == expected


class TestBuildTable:
    def test_cells_are_parsed(self):
        text = "| a | b |\n|---|\n| 1 | 2 |"
        rows = [(0, 9), (16, 25)]
        table = build_table(text, rows, lambda cell: [Text(text=cell.upper())])
        assert [c.children[0].text for c in table.head] == ["A", "B"]
        assert [c.children[0].text for c in table.rows[0]] == ["1", "2"]

    def test_needs_a_body_row(self):
        with pytest.raises(MalformedTable):
            build_table("| a |", [(0, 5)], lambda cell: [])

    def test_bad_row_reports_offset(self):
        text = "| a |\nnope"
        with pytest.raises(MalformedTable) as exc_info:
            build_table(text, [(0, 5), (6, 10)], lambda cell: [])
        assert exc_info.value.offset == 6


# ---------------------------------------------------------------------------
# Inflation
# ---------------------------------------------------------------------------

class TestInflate:
    def test_groups_inline_nodes(self):
        result = inflate([Text(text="a"), Bold(children=[Text(text="b")])])
        assert len(result) == 1
        assert isinstance(result[0], Paragraph)
        assert len(result[0].children) == 2

    def test_paragraph_break_closes(self):
        result = inflate([Text(text="a"), ParagraphBreak(), Text(text="b")])
        assert [type(n) for n in result] == [Paragraph, Paragraph]

    def test_structural_nodes_stand_alone(self):
        result = inflate([Text(text="a"), Header(level=1), Text(text="b"), CodeBlock(raw="x")])
        assert [type(n) for n in result] == [Paragraph, Header, Paragraph, CodeBlock]

    def test_no_empty_paragraphs(self):
        result = inflate([ParagraphBreak(), Header(level=1), ParagraphBreak()])
        assert [type(n) for n in result] == [Header]

    def test_block_quote_joins_paragraph(self):
        result = inflate([Text(text="a"), BlockQuote(children=[Text(text="q")]), Text(text="b")])
        assert len(result) == 1
        assert isinstance(result[0].children[1], BlockQuote)

    def test_existing_paragraph_is_kept(self):
        result = inflate([Paragraph(children=[Text(text="a")]), Text(text="b")])
        assert [type(n) for n in result] == [Paragraph, Paragraph]

    def test_children_are_flattened(self):
        element = Element(tag="div", children=[Text(text="a"), ParagraphBreak(), Text(text="b")])
        inflate([element])
        assert element.children == [Text(text="a"), Text(text="b")]

    def test_inline_keeps_structural_children(self):
        result = inflate_inline([Text(text="a"), Header(level=2), Text(text="b")])
        assert [type(n) for n in result] == [Text, Header, Text]

    def test_self_closing_element_untouched(self):
        element = Element(tag="br")
        inflate([element])
        assert element.children is None
