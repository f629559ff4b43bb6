"""Backslash-escape aware searching over ``(text, start, end)`` spans.

A character is escaped when it is preceded by an odd number of contiguous
backslashes; ``\\\\~`` is an escaped backslash followed by a live ``~``.
"""

from __future__ import annotations

import re

_ESCAPE_RE = re.compile(r"\\(.)", re.S)


def is_escaped(text: str, pos: int, start: int = 0) -> bool:
    """Return True if ``text[pos]`` is escaped, not looking back past ``start``."""
    count = 0
    i = pos - 1
    while i >= start and text[i] == "\\":
        count += 1
        i -= 1
    return count % 2 == 1


def find_unescaped(text: str, look: str, start: int, end: int) -> int:
    """Index of the first unescaped ``look`` in ``text[start:end]``, or -1."""
    pos = start
    while True:
        idx = text.find(look, pos, end)
        if idx == -1 or not is_escaped(text, idx, start):
            return idx
        pos = idx + 1


def find_unquoted(text: str, look: str, start: int, end: int) -> int:
    """Index of the first unescaped ``look`` outside double quotes, or -1."""
    in_quotes = False
    i = start
    while i < end:
        c = text[i]
        if c == "\\":
            i += 2
            continue
        if c == '"':
            in_quotes = not in_quotes
        elif not in_quotes and text.startswith(look, i) and i + len(look) <= end:
            return i
        i += 1
    return -1


def find_closing_brace(text: str, open_pos: int, end: int) -> int:
    """Index of the ``}`` matching the ``{`` at ``open_pos``, or -1.

    Escaped braces never count towards the nesting depth.
    """
    depth = 0
    i = open_pos
    while i < end:
        c = text[i]
        if c == "\\":
            i += 2
            continue
        if c == "{":
            depth += 1
        elif c == "}":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1


def unescape(text: str) -> str:
    """Drop the backslash from every escape sequence."""
    return _ESCAPE_RE.sub(r"\1", text)
