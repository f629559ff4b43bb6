"""Abstract base class for document renderers.

A renderer is a visitor with one ``visit_<type>`` method per node variant.
Every method is abstract, so a renderer that misses a variant cannot be
instantiated.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

from mml_converter.config import Config
from mml_converter.exceptions import UnknownReference, UnresolvedObjectLink
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
    Table,
    TableOfContents,
    Text,
    TocNode,
)


class BaseRenderer(ABC):
    """Base class that all renderer implementations must extend."""

    def __init__(
        self,
        config: Optional[Config] = None,
        articles: Optional[dict[str, ArticleRef]] = None,
    ):
        self.config = config or Config.default()
        self.articles = dict(articles or {})
        self.references: dict[str, Reference] = {}

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Return the output format name (e.g. 'html', 'docx')."""

    @abstractmethod
    def render(
        self,
        document: Document,
        toc: Optional[TocNode] = None,
        bibliography: Optional[list[BibliographyEntry]] = None,
    ) -> Any:
        """Render a document with its TOC and bibliography.

        Both side tables are derived from the document when omitted.
        """

    def visit(self, node: Node) -> Any:
        """Dispatch to the ``visit_<type>`` method for ``node``."""
        return getattr(self, f"visit_{node.type}")(node)

    def resolve_article(self, ref_id: str) -> ArticleRef:
        """Look up an object link target in the article index.

        Raises:
            UnresolvedObjectLink: The id is not in the index.
        """
        article = self.articles.get(ref_id)
        if article is None:
            raise UnresolvedObjectLink(ref_id)
        return article

    def resolve_citation(self, ref_id: str) -> Reference:
        """Look up a cited reference in the document being rendered."""
        reference = self.references.get(ref_id)
        if reference is None:
            raise UnknownReference(ref_id)
        return reference

    # -- one case per node variant -------------------------------------------

    @abstractmethod
    def visit_text(self, node: Text) -> Any: ...

    @abstractmethod
    def visit_paragraph(self, node: Paragraph) -> Any: ...

    @abstractmethod
    def visit_header(self, node: Header) -> Any: ...

    @abstractmethod
    def visit_list(self, node: List) -> Any: ...

    @abstractmethod
    def visit_list_item(self, node: ListItem) -> Any: ...

    @abstractmethod
    def visit_table(self, node: Table) -> Any: ...

    @abstractmethod
    def visit_cell(self, node: Cell) -> Any: ...

    @abstractmethod
    def visit_block_quote(self, node: BlockQuote) -> Any: ...

    @abstractmethod
    def visit_code_block(self, node: CodeBlock) -> Any: ...

    @abstractmethod
    def visit_inline_code(self, node: InlineCode) -> Any: ...

    @abstractmethod
    def visit_bold(self, node: Bold) -> Any: ...

    @abstractmethod
    def visit_italic(self, node: Italic) -> Any: ...

    @abstractmethod
    def visit_bold_italic(self, node: BoldItalic) -> Any: ...

    @abstractmethod
    def visit_link(self, node: Link) -> Any: ...

    @abstractmethod
    def visit_object_link(self, node: ObjectLink) -> Any: ...

    @abstractmethod
    def visit_citation(self, node: Citation) -> Any: ...

    @abstractmethod
    def visit_toc(self, node: TableOfContents) -> Any: ...

    @abstractmethod
    def visit_math(self, node: Math) -> Any: ...

    @abstractmethod
    def visit_element(self, node: Element) -> Any: ...

    @abstractmethod
    def visit_paragraph_break(self, node: ParagraphBreak) -> Any: ...
