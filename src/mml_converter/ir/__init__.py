"""Document tree models."""

from mml_converter.ir.schema import (
    ArticleRef,
    BibliographyEntry,
    BlockQuote,
    Bold,
    BoldItalic,
    Cell,
    Citation,
    CodeBlock,
    Document,
    Element,
    ElementForm,
    EntrySegment,
    Header,
    InlineCode,
    Italic,
    Link,
    List,
    ListItem,
    Math,
    Node,
    ObjectLink,
    Paragraph,
    ParagraphBreak,
    Reference,
    ReferenceKind,
    Section,
    Table,
    TableOfContents,
    Text,
    TocNode,
)

__all__ = [
    "ArticleRef",
    "BibliographyEntry",
    "BlockQuote",
    "Bold",
    "BoldItalic",
    "Cell",
    "Citation",
    "CodeBlock",
    "Document",
    "Element",
    "ElementForm",
    "EntrySegment",
    "Header",
    "InlineCode",
    "Italic",
    "Link",
    "List",
    "ListItem",
    "Math",
    "Node",
    "ObjectLink",
    "Paragraph",
    "ParagraphBreak",
    "Reference",
    "ReferenceKind",
    "Section",
    "Table",
    "TableOfContents",
    "Text",
    "TocNode",
]
