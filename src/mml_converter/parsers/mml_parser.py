"""Recursive MML parser.

Turns scanner tokens into tree nodes, recursing into header, list-item and
element content on sub-spans of the same source string. Block quote bodies
and table cells are derived strings (markers stripped, escapes removed), so
errors raised while parsing them are re-anchored to the construct's offset
in the original document.
"""

from __future__ import annotations

import logging
from typing import Optional

from mml_converter import __version__
from mml_converter.exceptions import ParseError
from mml_converter.ir.schema import (
    BlockQuote,
    Bold,
    BoldItalic,
    Citation,
    CodeBlock,
    Document,
    Element,
    ElementForm,
    Header,
    InlineCode,
    Italic,
    Link,
    ListItem,
    Math,
    Node,
    ObjectLink,
    ParagraphBreak,
    Reference,
    TableOfContents,
    Text,
)
from mml_converter.parsers.base import BaseParser
from mml_converter.parsers.elements import TagSpan
from mml_converter.parsers.escapes import unescape
from mml_converter.parsers.inflate import inflate
from mml_converter.parsers.reconstruct import build_table, reconstruct_lists
from mml_converter.parsers.references import merge_references, parse_references
from mml_converter.parsers.scanner import Scanner, Token, TokenKind
from mml_converter.toc import collect_sections

logger = logging.getLogger(__name__)

# A single newline right after one of these is part of the construct's line
_BLOCK_KINDS = frozenset({
    TokenKind.LIST_ITEM,
    TokenKind.HEADER,
    TokenKind.CODE_BLOCK,
    TokenKind.BLOCK_QUOTE,
    TokenKind.MATH_BLOCK,
    TokenKind.TABLE,
    TokenKind.TOC,
})


class MmlParser(BaseParser):
    """Parser for MML source text."""

    @property
    def name(self) -> str:
        return "mml"

    @property
    def version(self) -> str:
        return __version__

    def parse(self, text: str) -> Document:
        source = text.replace("\r\n", "\n")
        state = _ParseState(source, verbatim_tags=self.config.parser.verbatim_tags)

        nodes = state.parse_span(source, 0, len(source))
        nodes = inflate(nodes)
        nodes = reconstruct_lists(nodes)
        sections = collect_sections(nodes)

        logger.debug(
            "Parsed %d top-level nodes, %d sections, %d references",
            len(nodes), len(sections), len(state.references),
        )
        return Document(
            source=source,
            children=nodes,
            references=state.references,
            sections=sections,
        )


class _ParseState:
    """Mutable state of a single parse: reference table and header counter."""

    def __init__(self, source: str, verbatim_tags: list[str]):
        self.source = source
        self.verbatim_tags = frozenset(verbatim_tags)
        self.references: dict[str, Reference] = {}
        self.header_count = 0
        # Absolute offset of the outermost derived string being parsed
        self._anchor: Optional[int] = None

    def parse_span(self, text: str, start: int, end: int, *, block: bool = True) -> list[Node]:
        """Parse ``text[start:end]`` into a flat node list."""
        nodes: list[Node] = []
        after_block = False

        for token in Scanner(text, start, end, block=block):
            if token.kind == TokenKind.NEWLINE:
                if not after_block:
                    _append(nodes, Text(text="\n"))
                after_block = False
                continue

            node = self._to_node(text, token)
            if node is not None:
                _append(nodes, node)
            after_block = token.kind in _BLOCK_KINDS or (
                token.kind == TokenKind.ELEMENT and token.tag.form == ElementForm.BLOCK
            )
        return nodes

    def parse_derived(self, derived: str, offset: int, *, block: bool) -> list[Node]:
        """Parse a string derived from the source at ``offset``."""
        if self._anchor is not None:
            return self.parse_span(derived, 0, len(derived), block=block)

        self._anchor = offset
        try:
            return self.parse_span(derived, 0, len(derived), block=block)
        except ParseError as exc:
            raise type(exc)(exc.reason, offset=offset, source=self.source) from exc
        finally:
            self._anchor = None

    # -- token handlers -----------------------------------------------------

    def _to_node(self, text: str, token: Token) -> Optional[Node]:
        kind = token.kind
        match = token.match

        if kind == TokenKind.TEXT:
            return Text(text=text[token.start:token.end])
        if kind == TokenKind.ESCAPED:
            return Text(text=match.group("char"))
        if kind == TokenKind.BOLD_ITALIC:
            return BoldItalic(children=[Text(text=unescape(match.group("body")))])
        if kind == TokenKind.BOLD:
            return Bold(children=[Text(text=unescape(match.group("body")))])
        if kind == TokenKind.ITALIC:
            return Italic(children=[Text(text=unescape(match.group("body")))])
        if kind == TokenKind.LIST_ITEM:
            return ListItem(
                ordered=match.group("marker") == "$",
                indent=len(match.group("indent")),
                children=self.parse_span(text, match.start("text"), match.end("text"), block=False),
            )
        if kind == TokenKind.HEADER:
            return self._header(text, token)
        if kind == TokenKind.OBJECT_LINK:
            return ObjectLink(ref_id=match.group("id"))
        if kind == TokenKind.LINK:
            return Link(text=unescape(match.group("text")), href=match.group("href"))
        if kind == TokenKind.CITATION:
            return Citation(ref_id=match.group("id"))
        if kind == TokenKind.REFERENCES:
            self._references(match.group("body"))
            return None
        if kind == TokenKind.ELEMENT:
            return self._element(text, token.tag)
        if kind == TokenKind.CODE_BLOCK:
            return CodeBlock(lang=match.group("lang") or None, raw=match.group("code") or "")
        if kind == TokenKind.INLINE_CODE:
            return InlineCode(lang=match.group("lang"), raw=match.group("code"))
        if kind == TokenKind.TOC:
            return TableOfContents()
        if kind == TokenKind.PARAGRAPH_BREAK:
            return ParagraphBreak()
        if kind == TokenKind.BLOCK_QUOTE:
            return self._block_quote(text, token)
        if kind == TokenKind.MATH_BLOCK:
            return Math(equation=match.group("eq") or "", inline=False)
        if kind == TokenKind.MATH_INLINE:
            return Math(equation=match.group("eq"), inline=True)
        if kind == TokenKind.TABLE:
            return build_table(
                text,
                token.rows,
                lambda cell: self.parse_derived(cell, token.start, block=False),
            )
        raise ParseError(f"Unhandled token kind: {kind.value}", offset=token.start, source=text)

    def _header(self, text: str, token: Token) -> Header:
        match = token.match
        start, end = match.start("text"), match.end("text")
        while start < end and text[start] in " \t":
            start += 1
        while end > start and text[end - 1] in " \t":
            end -= 1

        self.header_count += 1
        return Header(
            level=len(match.group("hashes")),
            ordinal=self.header_count,
            children=self.parse_span(text, start, end, block=False),
        )

    def _element(self, text: str, span: TagSpan) -> Element:
        raw = text[span.raw_start:span.raw_end] if span.has_content else None
        children = None
        if span.has_content and span.tag not in self.verbatim_tags:
            children = self.parse_span(text, span.content_start, span.content_end)
        return Element(
            tag=span.tag,
            attrs=span.attrs,
            form=span.form,
            children=children,
            raw=raw,
        )

    def _block_quote(self, text: str, token: Token) -> Node:
        lines = text[token.start:token.end].split("\n")
        stripped = []
        for line in lines:
            line = line[1:] if line.startswith(">") else line
            stripped.append(line[1:] if line.startswith(" ") else line)
        body = "\n".join(stripped).rstrip("\n")
        return BlockQuote(children=self.parse_derived(body, token.start, block=True))

    def _references(self, body: str) -> None:
        parsed = parse_references(body, first_ordinal=len(self.references) + 1)
        merge_references(self.references, parsed)
        logger.debug("Parsed %d references", len(parsed))


def _append(nodes: list[Node], node: Node) -> None:
    """Append a node, merging adjacent text."""
    if isinstance(node, Text) and nodes and isinstance(nodes[-1], Text):
        nodes[-1] = Text(text=nodes[-1].text + node.text)
    else:
        nodes.append(node)
