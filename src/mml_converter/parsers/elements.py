"""Tagged-element grammar.

A tagged element starts with ``~NAME``, optionally followed by attributes in
either bracket form (``[a=1;b="x;y"]``) or double-colon form
(``::a=1::b=2::``), and then a content segment:

* ``~`` - self-closing, no content
* ``{...}`` - content up to the matching unescaped ``}``
* a space - content up to the end of the line
* a newline - content up to the first line reading ``~DELIM~``, where DELIM
  is the tag name unless overridden with a ``delim`` attribute

``locate_tag`` only finds the extent of an element; the parser recurses
into the content span itself.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional

from mml_converter.exceptions import MalformedElementAttributes, UnterminatedConstruct
from mml_converter.ir.schema import ElementForm
from mml_converter.parsers.escapes import (
    find_closing_brace,
    find_unescaped,
    find_unquoted,
    unescape,
)

_TAG_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_\-]*")
_ATTR_NAME_RE = re.compile(r"[A-Za-z0-9_\-]+")
_COLON_PAIR_RE = re.compile(r"([A-Za-z0-9_\-]+)=")


@dataclass(frozen=True)
class TagSpan:
    """Location of a tagged element within a source span.

    ``raw_start:raw_end`` is the exact text between the content delimiters;
    ``content_start:content_end`` is the part that gets parsed (for block
    elements it drops the newline preceding the closing line).
    """

    tag: str
    form: ElementForm
    start: int
    end: int
    attrs: dict[str, list[str]] = field(default_factory=dict)
    raw_start: Optional[int] = None
    raw_end: Optional[int] = None
    content_start: Optional[int] = None
    content_end: Optional[int] = None

    @property
    def has_content(self) -> bool:
        return self.content_start is not None


def locate_tag(text: str, pos: int, end: int) -> Optional[TagSpan]:
    """Find the tagged element starting at ``text[pos]``.

    Returns None when ``pos`` does not start an element, so the ``~`` is
    literal text.

    Raises:
        UnterminatedConstruct: An attribute segment or content segment is
            never closed.
        MalformedElementAttributes: The attribute segment is not a list of
            ``name=value`` pairs.
    """
    if pos >= end or text[pos] != "~":
        return None

    name_match = _TAG_NAME_RE.match(text, pos + 1, end)
    if name_match is None:
        return None
    tag = name_match.group()
    cursor = name_match.end()

    attrs: dict[str, list[str]] = {}
    has_attrs = False
    if cursor < end and text[cursor] == "[":
        close = find_unquoted(text, "]", cursor + 1, end)
        if close == -1:
            raise UnterminatedConstruct(
                f"Attribute list of ~{tag} is never closed", offset=cursor, source=text
            )
        attrs = parse_attributes(text, cursor + 1, close)
        cursor = close + 1
        has_attrs = True
    elif text.startswith("::", cursor) and cursor + 2 <= end:
        attrs, cursor = _parse_colon_attributes(text, cursor, end, tag)
        has_attrs = True

    if cursor >= end:
        if has_attrs:
            return TagSpan(tag, ElementForm.SELF_CLOSING, pos, cursor, attrs)
        return None

    marker = text[cursor]
    if marker == "~":
        return TagSpan(tag, ElementForm.SELF_CLOSING, pos, cursor + 1, attrs)

    if marker == "{":
        close = find_closing_brace(text, cursor, end)
        if close == -1:
            raise UnterminatedConstruct(
                f"Brace content of ~{tag} is never closed", offset=cursor, source=text
            )
        return TagSpan(
            tag, ElementForm.BRACE, pos, close + 1, attrs,
            raw_start=cursor + 1, raw_end=close,
            content_start=cursor + 1, content_end=close,
        )

    if marker == " ":
        eol = text.find("\n", cursor, end)
        if eol == -1:
            eol = end
        return TagSpan(
            tag, ElementForm.LINE, pos, eol, attrs,
            raw_start=cursor + 1, raw_end=eol,
            content_start=cursor + 1, content_end=eol,
        )

    if marker == "\n":
        return _locate_block(text, pos, cursor, end, tag, attrs)

    if has_attrs:
        return TagSpan(tag, ElementForm.SELF_CLOSING, pos, cursor, attrs)
    return None


def _locate_block(
    text: str, pos: int, newline: int, end: int, tag: str, attrs: dict[str, list[str]]
) -> TagSpan:
    delims = attrs.get("delim")
    delim = delims[0] if delims else tag
    closing = re.compile(rf"^[ \t]*~{re.escape(delim)}~[ \t]*$", re.M)

    raw_start = newline + 1
    match = closing.search(text, raw_start, end)
    if match is None:
        raise UnterminatedConstruct(
            f"Block ~{tag} is never closed by a ~{delim}~ line", offset=pos, source=text
        )

    raw_end = match.start()
    content_end = raw_end
    if raw_end > raw_start and text[raw_end - 1] == "\n":
        content_end -= 1
    return TagSpan(
        tag, ElementForm.BLOCK, pos, match.end(), attrs,
        raw_start=raw_start, raw_end=raw_end,
        content_start=raw_start, content_end=content_end,
    )


def parse_attributes(text: str, start: int, end: int, sep: str = ";") -> dict[str, list[str]]:
    """Parse ``name=value`` pairs separated by ``sep``.

    Values may be double-quoted to contain the separator or brackets.
    Repeated names accumulate their values in order.
    """
    attrs: dict[str, list[str]] = {}
    pos = start
    while pos < end:
        while pos < end and text[pos] in " \t":
            pos += 1
        if pos >= end:
            break

        name_match = _ATTR_NAME_RE.match(text, pos, end)
        if name_match is None or name_match.end() >= end or text[name_match.end()] != "=":
            raise MalformedElementAttributes(
                "Expected name=value in attribute list", offset=pos, source=text
            )
        name = name_match.group()
        value_start = name_match.end() + 1

        if value_start < end and text[value_start] == '"':
            value_end = find_unescaped(text, '"', value_start + 1, end)
            if value_end == -1:
                raise UnterminatedConstruct(
                    f"Quoted value of attribute '{name}' is never closed",
                    offset=value_start, source=text,
                )
            value = unescape(text[value_start + 1:value_end])
            pos = value_end + 1
            while pos < end and text[pos] in " \t":
                pos += 1
            if pos < end:
                if text[pos] != sep:
                    raise MalformedElementAttributes(
                        f"Expected '{sep}' after quoted value of '{name}'",
                        offset=pos, source=text,
                    )
                pos += 1
        else:
            value_end = find_unescaped(text, sep, value_start, end)
            if value_end == -1:
                value_end = end
            value = text[value_start:value_end].rstrip(" \t")
            if not value:
                raise MalformedElementAttributes(
                    f"Attribute '{name}' has an empty value", offset=value_start, source=text
                )
            pos = value_end + 1

        attrs.setdefault(name, []).append(value)
    return attrs


def _parse_colon_attributes(
    text: str, cursor: int, end: int, tag: str
) -> tuple[dict[str, list[str]], int]:
    """Parse a ``::a=1::b=2::`` run starting at ``cursor``; return attrs and new cursor."""
    attrs: dict[str, list[str]] = {}
    pos = cursor + 2
    while True:
        pair = _COLON_PAIR_RE.match(text, pos, end)
        if pair is None:
            break
        close = find_unquoted(text, "::", pair.end(), end)
        if close == -1:
            raise UnterminatedConstruct(
                f"Attribute run of ~{tag} is never closed with '::'", offset=pos, source=text
            )
        value = text[pair.end():close]
        if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
            value = unescape(value[1:-1])
        attrs.setdefault(pair.group(1), []).append(value)
        pos = close + 2

    if not attrs:
        raise MalformedElementAttributes(
            f"Expected name=value after '::' in ~{tag}", offset=cursor, source=text
        )
    return attrs, pos
