"""Tests for the document tree models, traversal helpers and JSON checkpoints."""

import pytest
from pydantic import TypeAdapter, ValidationError

from mml_converter.ir.schema import (
    NODE_TYPES,
    BibliographyEntry,
    Bold,
    Cell,
    Citation,
    CodeBlock,
    Document,
    Element,
    ElementForm,
    EntrySegment,
    Header,
    Link,
    List,
    ListItem,
    Math,
    Node,
    Paragraph,
    Reference,
    ReferenceKind,
    Section,
    Table,
    Text,
)
from mml_converter.ir.walk import child_nodes, iter_nodes, plain_text
from mml_converter.parsers.mml_parser import MmlParser

NODE_ADAPTER = TypeAdapter(Node)


def _sample_document() -> Document:
    return Document(
        source="# T",
        children=[
            Header(level=1, ordinal=1, children=[Text(text="T")]),
            Paragraph(children=[
                Text(text="see "),
                Bold(children=[Text(text="this")]),
                Citation(ref_id="a"),
            ]),
            List(items=[ListItem(children=[Text(text="x")])]),
            Table(head=[Cell(children=[Text(text="h")])], rows=[[Cell(children=[Text(text="c")])]]),
            Element(tag="br"),
        ],
        references={"a": Reference(id="a", ordinal=1, kind=ReferenceKind.WEB)},
        sections=[Section(title="T", level=1, ordinal=1)],
    )


class TestNodeUnion:
    def test_every_variant_has_unique_type(self):
        tags = [model.model_fields["type"].default for model in NODE_TYPES]
        assert len(tags) == len(set(tags)) == 20

    @pytest.mark.parametrize(
        "data, expected",
        [
            ({"type": "text", "text": "x"}, Text),
            ({"type": "math", "equation": "a", "inline": True}, Math),
            ({"type": "element", "tag": "b", "form": "brace", "children": []}, Element),
            ({"type": "link", "text": "t", "href": "h"}, Link),
        ],
    )
    def test_discriminated_validation(self, data, expected):
        assert isinstance(NODE_ADAPTER.validate_python(data), expected)

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            NODE_ADAPTER.validate_python({"type": "figure"})

    def test_header_level_bounds(self):
        with pytest.raises(ValidationError):
            Header(level=7)

    def test_element_defaults(self):
        element = Element(tag="br")
        assert element.form == ElementForm.SELF_CLOSING
        assert element.children is None
        assert element.attrs == {}


class TestDocument:
    def test_document_is_frozen(self):
        document = _sample_document()
        with pytest.raises(ValidationError):
            document.source = "changed"

    def test_json_round_trip(self):
        document = _sample_document()
        loaded = Document.from_json(document.to_json())
        assert loaded == document
        assert isinstance(loaded.children[1].children[1], Bold)
        assert loaded.references["a"].kind == ReferenceKind.WEB

    def test_parsed_document_round_trip(self):
        document = MmlParser().parse("# A\n- x\n  $ y\n\n| a |\n|---|\n| ~b{z} |")
        assert Document.from_json(document.to_json()) == document

    def test_invalid_json_raises(self):
        with pytest.raises(ValueError):
            Document.from_json("{not json")


class TestWalk:
    def test_child_nodes_of_table(self):
        table = _sample_document().children[3]
        assert len(child_nodes(table)) == 2

    def test_child_nodes_of_leaf(self):
        assert child_nodes(Text(text="x")) == []
        assert child_nodes(Element(tag="br")) == []

    def test_iter_nodes_document_order(self):
        types = [node.type for node in iter_nodes(_sample_document().children)]
        assert types[:4] == ["header", "text", "paragraph", "text"]
        assert "list_item" in types
        assert types[-1] == "element"

    def test_plain_text(self):
        nodes = [
            Text(text="a "),
            Bold(children=[Text(text="b")]),
            CodeBlock(raw=" c"),
            Link(text=" d", href="x"),
            Math(equation=" e"),
            Citation(ref_id="ignored"),
        ]
        assert plain_text(nodes) == "a b c d e"


class TestBibliographyEntry:
    def test_text_joins_segments(self):
        entry = BibliographyEntry(
            ref_id="a",
            ordinal=1,
            kind=ReferenceKind.WEB,
            anchor_id="bib-ref-a",
            segments=[EntrySegment(role="ordinal", text="[1]"), EntrySegment(role="names", text="A.")],
        )
        assert entry.text == "[1] A."
