"""Tests for section collection and TOC tree construction."""

import pytest

from mml_converter.exceptions import InvalidHeaderLevel
from mml_converter.ir.schema import Section
from mml_converter.parsers.mml_parser import MmlParser
from mml_converter.toc import (
    BIBLIOGRAPHY_ANCHOR,
    build_section_tree,
    build_toc,
    header_anchor,
)


def _sections(*levels):
    return [Section(title=f"S{i}", level=level, ordinal=i) for i, level in enumerate(levels, 1)]


def _shape(node):
    return [(child.title, _shape(child)) for child in node.children]


class TestHeaderAnchor:
    def test_unsafe_characters_replaced(self):
        assert header_anchor("Hello, World!", 3) == "hello--world--3"

    def test_underscore_kept(self):
        assert header_anchor("snake_case", 1) == "snake_case-1"

    def test_repeated_titles_are_distinct(self):
        assert header_anchor("Intro", 1) != header_anchor("Intro", 4)


class TestBuildSectionTree:
    def test_empty(self):
        root = build_section_tree([])
        assert root.level == 0
        assert root.children == []

    def test_nesting(self):
        root = build_section_tree(_sections(1, 2, 1, 3))
        assert _shape(root) == [
            ("S1", [("S2", [])]),
            ("S3", [("S4", [])]),
        ]

    def test_same_level_are_siblings(self):
        root = build_section_tree(_sections(2, 2, 2))
        assert [c.title for c in root.children] == ["S1", "S2", "S3"]

    def test_skipped_levels_nest(self):
        root = build_section_tree(_sections(1, 4, 2))
        assert _shape(root) == [("S1", [("S2", []), ("S3", [])])]

    def test_deeper_then_shallower(self):
        root = build_section_tree(_sections(1, 2, 3, 2))
        assert _shape(root) == [("S1", [("S2", [("S3", [])]), ("S4", [])])]

    def test_starting_below_level_one(self):
        root = build_section_tree(_sections(3, 1))
        assert [c.title for c in root.children] == ["S1", "S2"]

    def test_anchor_ids(self):
        root = build_section_tree([Section(title="Getting Started", level=1, ordinal=2)])
        assert root.children[0].anchor_id == "getting-started-2"

    def test_invalid_level(self):
        with pytest.raises(InvalidHeaderLevel):
            build_section_tree([Section(title="Bad", level=0, ordinal=1)])

    def test_bibliography_leaf(self):
        root = build_section_tree(_sections(1, 2), with_bibliography=True, bibliography_title="Sources")
        last = root.children[-1]
        assert last.title == "Sources"
        assert last.anchor_id == BIBLIOGRAPHY_ANCHOR
        assert last.children == []

    def test_every_section_appears_once(self):
        sections = _sections(2, 1, 3, 3, 6, 2, 1)
        root = build_section_tree(sections)

        def walk(node):
            for child in node.children:
                yield child
                yield from walk(child)

        assert sorted(n.title for n in walk(root)) == sorted(s.title for s in sections)


class TestBuildToc:
    def test_from_document(self):
        document = MmlParser().parse("# A\n## B\n> ## Quoted\n# C")
        root = build_toc(document)
        assert [c.title for c in root.children] == ["A", "C"]
        assert [c.title for c in root.children[0].children] == ["B", "Quoted"]

    def test_bibliography_added_when_references_exist(self):
        document = MmlParser().parse("# A\n\n@References\n* x\n")
        root = build_toc(document, bibliography_title="Works Cited")
        assert root.children[-1].title == "Works Cited"

    def test_no_bibliography_without_references(self):
        root = build_toc(MmlParser().parse("# A"))
        assert [c.anchor_id for c in root.children] == ["a-1"]
