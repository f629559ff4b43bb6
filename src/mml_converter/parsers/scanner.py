"""Tokenizer that classifies MML source spans.

The scanner walks ``text[start:end]`` and, at each position, tries every
construct in priority order, falling back to a literal run. Tokens carry
absolute offsets into ``text`` so the parser can recurse into sub-spans of
the same string.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, Optional

from mml_converter.exceptions import MalformedTable, UnterminatedConstruct
from mml_converter.parsers.elements import TagSpan, locate_tag


class TokenKind(str, Enum):
    TEXT = "text"
    NEWLINE = "newline"
    BOLD_ITALIC = "bold_italic"
    BOLD = "bold"
    ITALIC = "italic"
    LIST_ITEM = "list_item"
    HEADER = "header"
    OBJECT_LINK = "object_link"
    LINK = "link"
    CITATION = "citation"
    REFERENCES = "references"
    ELEMENT = "element"
    CODE_BLOCK = "code_block"
    INLINE_CODE = "inline_code"
    TOC = "toc"
    PARAGRAPH_BREAK = "paragraph_break"
    BLOCK_QUOTE = "block_quote"
    MATH_BLOCK = "math_block"
    MATH_INLINE = "math_inline"
    TABLE = "table"
    ESCAPED = "escaped"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    start: int
    end: int
    match: Optional[re.Match] = None
    tag: Optional[TagSpan] = None
    rows: tuple[tuple[int, int], ...] = ()  # table lines, head row first


# ---------------------------------------------------------------------------
# Patterns (line-start anchoring is checked by the scanner, not the regex)
# ---------------------------------------------------------------------------

_EMPHASIS_BODY = r"(?![\s*])(?P<body>(?:\\.|[^*\n\\])+?)"
_BOLD_ITALIC_RE = re.compile(r"\*\*\*" + _EMPHASIS_BODY + r"\*\*\*")
_BOLD_RE = re.compile(r"\*\*" + _EMPHASIS_BODY + r"\*\*")
_ITALIC_RE = re.compile(r"\*" + _EMPHASIS_BODY + r"\*")
_LIST_ITEM_RE = re.compile(r"(?P<indent>[ \t]*)(?P<marker>[-*$]) (?P<text>[^\n]*)")
_HEADER_RE = re.compile(r"(?P<hashes>#{1,6})(?P<text>[^\n]*)")
_OBJECT_LINK_RE = re.compile(r"\[\[(?P<id>[\w:\-]+)\]\]")
_LINK_RE = re.compile(r"\((?P<text>[^()\n]+)\)\[(?P<href>[^\]\s]+)\]")
_CITATION_RE = re.compile(r"\^\[(?P<id>[\w\-]+)\]")
_REFERENCES_RE = re.compile(
    r"@References[ \t]*(?:\n|$)"
    r"(?P<body>(?:(?:[ \t]*\n)*[ \t]*\*[ \t]*[\w\-]+(?:[ \t]*\|[^\n]*)?"
    r"(?:\n[ \t]*\|[^\n]*|\n(?:[ \t]*\n)+[ \t]*\|[ \t]*[\w\-]+:[^\n]*)*(?:\n|$))*)"
)
_CODE_FENCE_RE = re.compile(
    r"```(?P<lang>[\w+#.\-]*)[ \t]*\n(?:(?P<code>.*?)\n)?[ \t]*```", re.S
)
_CODE_FENCE_OPEN_RE = re.compile(r"```[\w+#.\-]*[ \t]*\n")
_INLINE_CODE_RE = re.compile(r"`(?:<(?P<lang>[\w+#.\-]+)>)?(?P<code>[^`\n]+)`")
_TOC_RE = re.compile(r"\[toc\]", re.I)
_PARAGRAPH_BREAK_RE = re.compile(r"\n(?:[ \t]*\n)+")
_BLOCK_QUOTE_RE = re.compile(r">[^\n]*(?:\n>[^\n]*)*")
_MATH_BLOCK_RE = re.compile(r"\$\$[ \t]*\n(?:(?P<eq>.*?)\n)?[ \t]*\$\$", re.S)
_MATH_BLOCK_OPEN_RE = re.compile(r"\$\$[ \t]*\n")
_MATH_INLINE_RE = re.compile(r"\\\((?P<eq>.*?)\\\)", re.S)
_TABLE_HEAD_RE = re.compile(
    r"(?P<head>[ \t]*\|[^\n]*)\n"
    r"(?P<sep>[ \t]*\|?[ \t]*:?-+:?[ \t]*(?:\|[ \t]*:?-+:?[ \t]*)*\|?[ \t]*)(?=\n|$)"
)
_TABLE_ROW_RE = re.compile(r"\n(?P<row>[ \t]*\|[^\n]*)")
_ESCAPED_RE = re.compile(r"\\(?P<char>.)", re.S)
_PLAIN_RUN_RE = re.compile(r"[^*\[(^~`\\\n]+")


class Scanner:
    """Iterates the tokens of ``text[start:end]``.

    With ``block=False`` only inline constructs are recognized; header,
    list-item and table-cell text is scanned that way.
    """

    def __init__(self, text: str, start: int = 0, end: Optional[int] = None, *, block: bool = True):
        self.text = text
        self.start = start
        self.end = len(text) if end is None else end
        self.block = block

        rules: list[tuple[bool, Callable[[int, bool], Optional[Token]]]] = [
            (False, self._scan_bold_italic),
            (False, self._scan_bold),
            (False, self._scan_italic),
            (True, self._scan_list_item),
            (True, self._scan_header),
            (False, self._scan_object_link),
            (False, self._scan_link),
            (False, self._scan_citation),
            (True, self._scan_references),
            (False, self._scan_element),
            (True, self._scan_code_block),
            (False, self._scan_inline_code),
            (False, self._scan_toc),
            (False, self._scan_paragraph_break),
            (True, self._scan_block_quote),
            (True, self._scan_math_block),
            (False, self._scan_math_inline),
            (True, self._scan_table),
            (False, self._scan_escaped),
        ]
        self._rules = [rule for block_only, rule in rules if block or not block_only]

    def __iter__(self) -> Iterator[Token]:
        pos = self.start
        while pos < self.end:
            token = self._next_token(pos)
            yield token
            pos = token.end

    def _next_token(self, pos: int) -> Token:
        line_start = pos == 0 or self.text[pos - 1] == "\n"
        for rule in self._rules:
            token = rule(pos, line_start)
            if token is not None:
                return token

        if self.text[pos] == "\n":
            return Token(TokenKind.NEWLINE, pos, pos + 1)
        run = _PLAIN_RUN_RE.match(self.text, pos, self.end)
        return Token(TokenKind.TEXT, pos, run.end() if run else pos + 1)

    def _match(self, kind: TokenKind, pattern: re.Pattern, pos: int) -> Optional[Token]:
        match = pattern.match(self.text, pos, self.end)
        if match is None or match.end() == pos:
            return None
        return Token(kind, pos, match.end(), match=match)

    # -- inline rules -------------------------------------------------------

    def _scan_bold_italic(self, pos: int, line_start: bool) -> Optional[Token]:
        return self._match(TokenKind.BOLD_ITALIC, _BOLD_ITALIC_RE, pos)

    def _scan_bold(self, pos: int, line_start: bool) -> Optional[Token]:
        return self._match(TokenKind.BOLD, _BOLD_RE, pos)

    def _scan_italic(self, pos: int, line_start: bool) -> Optional[Token]:
        return self._match(TokenKind.ITALIC, _ITALIC_RE, pos)

    def _scan_object_link(self, pos: int, line_start: bool) -> Optional[Token]:
        return self._match(TokenKind.OBJECT_LINK, _OBJECT_LINK_RE, pos)

    def _scan_link(self, pos: int, line_start: bool) -> Optional[Token]:
        return self._match(TokenKind.LINK, _LINK_RE, pos)

    def _scan_citation(self, pos: int, line_start: bool) -> Optional[Token]:
        return self._match(TokenKind.CITATION, _CITATION_RE, pos)

    def _scan_element(self, pos: int, line_start: bool) -> Optional[Token]:
        span = locate_tag(self.text, pos, self.end)
        if span is None:
            return None
        return Token(TokenKind.ELEMENT, pos, span.end, tag=span)

    def _scan_inline_code(self, pos: int, line_start: bool) -> Optional[Token]:
        return self._match(TokenKind.INLINE_CODE, _INLINE_CODE_RE, pos)

    def _scan_toc(self, pos: int, line_start: bool) -> Optional[Token]:
        return self._match(TokenKind.TOC, _TOC_RE, pos)

    def _scan_paragraph_break(self, pos: int, line_start: bool) -> Optional[Token]:
        return self._match(TokenKind.PARAGRAPH_BREAK, _PARAGRAPH_BREAK_RE, pos)

    def _scan_math_inline(self, pos: int, line_start: bool) -> Optional[Token]:
        return self._match(TokenKind.MATH_INLINE, _MATH_INLINE_RE, pos)

    def _scan_escaped(self, pos: int, line_start: bool) -> Optional[Token]:
        return self._match(TokenKind.ESCAPED, _ESCAPED_RE, pos)

    # -- line-start rules ---------------------------------------------------

    def _scan_list_item(self, pos: int, line_start: bool) -> Optional[Token]:
        if not line_start:
            return None
        return self._match(TokenKind.LIST_ITEM, _LIST_ITEM_RE, pos)

    def _scan_header(self, pos: int, line_start: bool) -> Optional[Token]:
        if not line_start:
            return None
        token = self._match(TokenKind.HEADER, _HEADER_RE, pos)
        if token is None or not token.match.group("text").strip():
            return None
        return token

    def _scan_references(self, pos: int, line_start: bool) -> Optional[Token]:
        if not line_start:
            return None
        return self._match(TokenKind.REFERENCES, _REFERENCES_RE, pos)

    def _scan_code_block(self, pos: int, line_start: bool) -> Optional[Token]:
        if not line_start:
            return None
        token = self._match(TokenKind.CODE_BLOCK, _CODE_FENCE_RE, pos)
        if token is None and _CODE_FENCE_OPEN_RE.match(self.text, pos, self.end):
            raise UnterminatedConstruct("Code fence is never closed", offset=pos, source=self.text)
        return token

    def _scan_block_quote(self, pos: int, line_start: bool) -> Optional[Token]:
        if not line_start:
            return None
        return self._match(TokenKind.BLOCK_QUOTE, _BLOCK_QUOTE_RE, pos)

    def _scan_math_block(self, pos: int, line_start: bool) -> Optional[Token]:
        if not line_start:
            return None
        token = self._match(TokenKind.MATH_BLOCK, _MATH_BLOCK_RE, pos)
        if token is None and _MATH_BLOCK_OPEN_RE.match(self.text, pos, self.end):
            raise UnterminatedConstruct("Math block is never closed", offset=pos, source=self.text)
        return token

    def _scan_table(self, pos: int, line_start: bool) -> Optional[Token]:
        if not line_start:
            return None
        head = _TABLE_HEAD_RE.match(self.text, pos, self.end)
        if head is None:
            return None

        rows = [head.span("head")]
        cursor = head.end()
        while True:
            row = _TABLE_ROW_RE.match(self.text, cursor, self.end)
            if row is None:
                break
            rows.append(row.span("row"))
            cursor = row.end()

        if len(rows) == 1:
            raise MalformedTable("Table has no body rows", offset=pos, source=self.text)
        return Token(TokenKind.TABLE, pos, cursor, match=head, rows=tuple(rows))


def scan(text: str, start: int = 0, end: Optional[int] = None, *, block: bool = True) -> list[Token]:
    """Tokenize ``text[start:end]``."""
    return list(Scanner(text, start, end, block=block))
