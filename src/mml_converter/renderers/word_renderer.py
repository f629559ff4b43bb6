"""Document tree → .docx renderer.

Block nodes open Word paragraphs; inline nodes append runs to the paragraph
currently being written, carrying the bold/italic state of the emphasis
nodes that enclose them.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from docx import Document as new_docx
from docx.document import Document as DocxDocument
from docx.enum.text import WD_ALIGN_PARAGRAPH

from mml_converter.bibliography import citation_label, resolve_document
from mml_converter.exceptions import GenerationError
from mml_converter.ir.schema import (
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
    Table,
    TableOfContents,
    Text,
    TocNode,
)
from mml_converter.renderers.base import BaseRenderer
from mml_converter.renderers.styles import (
    add_hyperlink,
    apply_list_numbering,
    doc_style_or_fallback,
    ensure_styles_exist,
    heading_style_name,
    list_style_name,
)
from mml_converter.renderers.table_builder import build_table
from mml_converter.toc import build_toc

logger = logging.getLogger(__name__)


class WordRenderer(BaseRenderer):
    """Generates a Word document from a parsed document tree."""

    format_name = "docx"

    def __init__(self, config=None, articles=None):
        super().__init__(config, articles)
        self._doc: Optional[DocxDocument] = None
        self._container = None  # the document or a table cell
        self._paragraph = None
        self._list_stack: list[bool] = []
        self._bold = False
        self._italic = False
        self._toc: Optional[TocNode] = None

    def generate(
        self,
        document: Document,
        output_path: Path,
        toc: Optional[TocNode] = None,
        bibliography: Optional[list[BibliographyEntry]] = None,
    ) -> Path:
        """Render a document and write it to a .docx file.

        Returns:
            The output path (for convenience).
        """
        doc = self.render(document, toc, bibliography)
        try:
            doc.save(str(output_path))
        except OSError as exc:
            raise GenerationError(f"Failed to save document: {exc}") from exc

        logger.info("Generated %s", output_path)
        return output_path

    def render(
        self,
        document: Document,
        toc: Optional[TocNode] = None,
        bibliography: Optional[list[BibliographyEntry]] = None,
    ) -> DocxDocument:
        """Render and return a python-docx Document object."""
        self.references = document.references
        self._toc = toc if toc is not None else build_toc(
            document, self.config.html.bibliography_title
        )
        if bibliography is None:
            bibliography = resolve_document(document)

        doc = new_docx()
        ensure_styles_exist(doc)
        if document.sections:
            doc.core_properties.title = document.sections[0].title

        self._doc = doc
        self._container = doc
        self._paragraph = None
        for node in document.children:
            self.visit(node)
            self._paragraph = None

        self._render_bibliography(bibliography)
        return doc

    # -- paragraph management -------------------------------------------------

    def _style(self, name: str) -> str:
        return doc_style_or_fallback(self._doc, name, self.config.style.body_style)

    def _new_paragraph(self, style: Optional[str] = None):
        self._paragraph = self._container.add_paragraph(
            style=self._style(style or self.config.style.body_style)
        )
        return self._paragraph

    def _current_paragraph(self):
        if self._paragraph is None:
            self._new_paragraph()
        return self._paragraph

    def _add_run(self, text: str):
        run = self._current_paragraph().add_run(text)
        if self._bold:
            run.bold = True
        if self._italic:
            run.italic = True
        return run

    @contextmanager
    def _emphasis(self, bold: bool = False, italic: bool = False) -> Iterator[None]:
        saved = (self._bold, self._italic)
        self._bold = self._bold or bold
        self._italic = self._italic or italic
        try:
            yield
        finally:
            self._bold, self._italic = saved

    def _visit_all(self, nodes: list[Node]) -> None:
        for node in nodes:
            self.visit(node)

    # -- blocks ---------------------------------------------------------------

    def visit_paragraph(self, node: Paragraph) -> None:
        # Opened lazily by the first run, so a paragraph holding only a
        # block quote or display math leaves no empty Normal paragraph
        self._paragraph = None
        self._visit_all(node.children)
        self._paragraph = None

    def visit_header(self, node: Header) -> None:
        # doc.add_heading() ignores heading_prefix, so always go by style name
        self._new_paragraph(heading_style_name(self.config.style, node.level))
        self._visit_all(node.children)
        self._paragraph = None

    def visit_list(self, node: List) -> None:
        self._paragraph = None
        self._list_stack.append(node.ordered)
        try:
            for item in node.items:
                self.visit(item)
        finally:
            self._list_stack.pop()
        self._paragraph = None

    def visit_list_item(self, node: ListItem) -> None:
        ordered = self._list_stack[-1] if self._list_stack else node.ordered
        level = max(len(self._list_stack), 1)

        paragraph = self._new_paragraph(list_style_name(self.config.style, ordered, level))
        apply_list_numbering(paragraph, ordered, level)
        # A nested list closes the item's paragraph; text after it opens a new one
        self._visit_all(node.children)
        self._paragraph = None

    def visit_table(self, node: Table) -> None:
        self._paragraph = None
        build_table(self._doc, node, self.config.style, self._write_cell)

    def _write_cell(self, docx_cell, node: Cell) -> None:
        saved = (self._container, self._paragraph)
        self._container = docx_cell
        self._paragraph = docx_cell.paragraphs[0]
        try:
            self.visit(node)
        finally:
            self._container, self._paragraph = saved

    def visit_cell(self, node: Cell) -> None:
        self._visit_all(node.children)

    def visit_block_quote(self, node: BlockQuote) -> None:
        self._new_paragraph(self.config.style.quote_style)
        self._visit_all(node.children)
        self._paragraph = None

    def visit_code_block(self, node: CodeBlock) -> None:
        self._new_paragraph()
        run = self._paragraph.add_run(node.raw)
        run.font.name = self.config.style.code_font
        self._paragraph = None

    def visit_toc(self, node: TableOfContents) -> None:
        self._new_paragraph(heading_style_name(self.config.style, 1))
        self._paragraph.add_run(self.config.html.toc_title)
        if self._toc is not None:
            self._toc_entries(self._toc, level=1)
        self._paragraph = None

    def _toc_entries(self, parent: TocNode, level: int) -> None:
        for child in parent.children:
            paragraph = self._new_paragraph(list_style_name(self.config.style, True, level))
            apply_list_numbering(paragraph, True, level)
            paragraph.add_run(child.title)
            self._toc_entries(child, level + 1)

    def visit_math(self, node: Math) -> None:
        if node.inline:
            with self._emphasis(italic=True):
                self._add_run(node.equation)
            return
        paragraph = self._new_paragraph()
        paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
        paragraph.add_run(node.equation).italic = True
        self._paragraph = None

    def visit_element(self, node: Element) -> None:
        if node.children is not None:
            self._visit_all(node.children)
        elif node.raw is not None:
            run = self._add_run(node.raw)
            run.font.name = self.config.style.code_font
        else:
            logger.debug("Skipping self-closing element ~%s in Word output", node.tag)

    def visit_paragraph_break(self, node: ParagraphBreak) -> None:
        self._paragraph = None

    # -- inline ---------------------------------------------------------------

    def visit_text(self, node: Text) -> None:
        self._add_run(node.text)

    def visit_inline_code(self, node: InlineCode) -> None:
        run = self._add_run(node.raw)
        run.font.name = self.config.style.code_font

    def visit_bold(self, node: Bold) -> None:
        with self._emphasis(bold=True):
            self._visit_all(node.children)

    def visit_italic(self, node: Italic) -> None:
        with self._emphasis(italic=True):
            self._visit_all(node.children)

    def visit_bold_italic(self, node: BoldItalic) -> None:
        with self._emphasis(bold=True, italic=True):
            self._visit_all(node.children)

    def visit_link(self, node: Link) -> None:
        add_hyperlink(self._current_paragraph(), node.text, node.href)

    def visit_object_link(self, node: ObjectLink) -> None:
        article = self.resolve_article(node.ref_id)
        add_hyperlink(self._current_paragraph(), article.title, article.uri)

    def visit_citation(self, node: Citation) -> None:
        reference = self.resolve_citation(node.ref_id)
        run = self._add_run(citation_label(reference))
        run.font.superscript = True

    # -- bibliography ---------------------------------------------------------

    def _render_bibliography(self, bibliography: list[BibliographyEntry]) -> None:
        if not bibliography:
            return
        self._new_paragraph(heading_style_name(self.config.style, 1))
        self._paragraph.add_run(self.config.html.bibliography_title)
        for entry in bibliography:
            self._new_paragraph().add_run(entry.text)
        self._paragraph = None
