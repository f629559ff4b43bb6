"""Pydantic models for the MML document tree.

The tree is the central contract between the parser and the renderers.
Nodes form a closed discriminated union over the ``type`` field; containers
hold their children in plain lists and never point back to their parent.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Leaf nodes
# ---------------------------------------------------------------------------


class Text(BaseModel):
    type: Literal["text"] = "text"
    text: str = ""


class CodeBlock(BaseModel):
    type: Literal["code_block"] = "code_block"
    lang: Optional[str] = None
    raw: str = ""


class InlineCode(BaseModel):
    type: Literal["inline_code"] = "inline_code"
    lang: Optional[str] = None
    raw: str = ""


class Link(BaseModel):
    type: Literal["link"] = "link"
    text: str = ""
    href: str = ""


class ObjectLink(BaseModel):
    """Cross-document link, resolved against the article index at render time."""

    type: Literal["object_link"] = "object_link"
    ref_id: str


class Citation(BaseModel):
    """In-text citation of a bibliography entry."""

    type: Literal["citation"] = "citation"
    ref_id: str


class TableOfContents(BaseModel):
    type: Literal["toc"] = "toc"


class Math(BaseModel):
    type: Literal["math"] = "math"
    equation: str = ""
    inline: bool = False


class ParagraphBreak(BaseModel):
    """Transient marker consumed by tree inflation."""

    type: Literal["paragraph_break"] = "paragraph_break"


# ---------------------------------------------------------------------------
# Container nodes
# ---------------------------------------------------------------------------


class Paragraph(BaseModel):
    type: Literal["paragraph"] = "paragraph"
    children: list[Node] = Field(default_factory=list)


class Header(BaseModel):
    type: Literal["header"] = "header"
    level: int = Field(ge=1, le=6)
    ordinal: int = 0  # document-order position, 1-based
    children: list[Node] = Field(default_factory=list)


class ListItem(BaseModel):
    """A list entry.

    ``ordered`` and ``indent`` come from the source line and drive list
    reconstruction; once nested, an item's sub-list lives in ``children``.
    """

    type: Literal["list_item"] = "list_item"
    ordered: bool = False
    indent: int = 0
    children: list[Node] = Field(default_factory=list)


class List(BaseModel):
    type: Literal["list"] = "list"
    ordered: bool = False
    items: list[ListItem] = Field(default_factory=list)


class Cell(BaseModel):
    type: Literal["cell"] = "cell"
    children: list[Node] = Field(default_factory=list)


class Table(BaseModel):
    type: Literal["table"] = "table"
    head: list[Cell] = Field(default_factory=list)
    rows: list[list[Cell]] = Field(default_factory=list)


class BlockQuote(BaseModel):
    type: Literal["block_quote"] = "block_quote"
    children: list[Node] = Field(default_factory=list)


class Bold(BaseModel):
    type: Literal["bold"] = "bold"
    children: list[Node] = Field(default_factory=list)


class Italic(BaseModel):
    type: Literal["italic"] = "italic"
    children: list[Node] = Field(default_factory=list)


class BoldItalic(BaseModel):
    type: Literal["bold_italic"] = "bold_italic"
    children: list[Node] = Field(default_factory=list)


class ElementForm(str, Enum):
    SELF_CLOSING = "self_closing"
    BRACE = "brace"
    LINE = "line"
    BLOCK = "block"


class Element(BaseModel):
    """A generic tagged element (``~tag[...]{...}``).

    ``raw`` is the exact source between the content delimiters; ``children``
    is None for self-closing and verbatim elements.
    """

    type: Literal["element"] = "element"
    tag: str
    attrs: dict[str, list[str]] = Field(default_factory=dict)
    form: ElementForm = ElementForm.SELF_CLOSING
    children: Optional[list[Node]] = None
    raw: Optional[str] = None


Node = Annotated[
    Union[
        Text,
        Paragraph,
        Header,
        List,
        ListItem,
        Table,
        Cell,
        BlockQuote,
        CodeBlock,
        InlineCode,
        Bold,
        Italic,
        BoldItalic,
        Link,
        ObjectLink,
        Citation,
        TableOfContents,
        Math,
        Element,
        ParagraphBreak,
    ],
    Field(discriminator="type"),
]

NODE_TYPES: tuple[type[BaseModel], ...] = (
    Text,
    Paragraph,
    Header,
    List,
    ListItem,
    Table,
    Cell,
    BlockQuote,
    CodeBlock,
    InlineCode,
    Bold,
    Italic,
    BoldItalic,
    Link,
    ObjectLink,
    Citation,
    TableOfContents,
    Math,
    Element,
    ParagraphBreak,
)

# Resolve the recursive ``Node`` references now that the union exists
for _model in (Paragraph, Header, ListItem, List, Cell, Table, BlockQuote,
               Bold, Italic, BoldItalic, Element):
    _model.model_rebuild()


# ---------------------------------------------------------------------------
# Side tables
# ---------------------------------------------------------------------------


class ReferenceKind(str, Enum):
    WEB = "web"
    GOV_PUB = "gov-pub"
    OTHER = "other"


class Reference(BaseModel):
    """A bibliography record parsed from an ``@References`` block."""

    id: str
    ordinal: int
    kind: ReferenceKind = ReferenceKind.OTHER
    fields: dict[str, str] = Field(default_factory=dict)


class Section(BaseModel):
    title: str
    level: int
    ordinal: int


class TocNode(BaseModel):
    level: int = 0
    anchor_id: str = ""
    title: str = ""
    children: list[TocNode] = Field(default_factory=list)


TocNode.model_rebuild()


class EntrySegment(BaseModel):
    role: str
    text: str


class BibliographyEntry(BaseModel):
    """A formatted IEEE-style bibliography entry."""

    ref_id: str
    ordinal: int
    kind: ReferenceKind
    anchor_id: str
    href: Optional[str] = None
    segments: list[EntrySegment] = Field(default_factory=list)

    @property
    def text(self) -> str:
        return " ".join(segment.text for segment in self.segments)


class ArticleRef(BaseModel):
    """An entry of the cross-document article index."""

    id: str
    title: str
    uri: str = ""


# ---------------------------------------------------------------------------
# Top-level document
# ---------------------------------------------------------------------------


class Document(BaseModel):
    """A parsed MML document. Immutable once the parser returns it."""

    model_config = ConfigDict(frozen=True)

    source: str = ""
    children: list[Node] = Field(default_factory=list)
    references: dict[str, Reference] = Field(default_factory=dict)
    sections: list[Section] = Field(default_factory=list)

    def to_json(self, **kwargs) -> str:
        """Serialize to JSON string."""
        return self.model_dump_json(indent=2, **kwargs)

    @classmethod
    def from_json(cls, json_str: str) -> Document:
        """Deserialize from JSON string."""
        return cls.model_validate_json(json_str)
