"""HTML renderer.

Produces an HTML fragment for the article body: the document tree, the
table of contents at the ``[toc]`` marker and the bibliography section at
the end. Rendering only accumulates strings; writing the result is the
caller's job.
"""

from __future__ import annotations

import logging
from html import escape
from typing import Optional

from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from mml_converter.bibliography import citation_label, reference_anchor, resolve_document
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
from mml_converter.ir.walk import plain_text
from mml_converter.renderers.base import BaseRenderer
from mml_converter.toc import BIBLIOGRAPHY_ANCHOR, build_toc, header_anchor

logger = logging.getLogger(__name__)

TOP_ANCHOR = "top"

# Attributes that steer parsing and never reach the output
_PARSER_ATTRS = frozenset({"delim"})


class HtmlRenderer(BaseRenderer):
    """Renders a document tree to an HTML string."""

    format_name = "html"

    def __init__(self, config=None, articles=None):
        super().__init__(config, articles)
        self._formatter = HtmlFormatter(nowrap=True)
        self._toc: Optional[TocNode] = None

    def render(
        self,
        document: Document,
        toc: Optional[TocNode] = None,
        bibliography: Optional[list[BibliographyEntry]] = None,
    ) -> str:
        html_config = self.config.html
        self.references = document.references
        self._toc = toc if toc is not None else build_toc(document, html_config.bibliography_title)
        if bibliography is None:
            bibliography = resolve_document(document)

        parts = []
        if html_config.back_to_top:
            parts.append(f'<a tabindex="-1" class="anchor" id="{TOP_ANCHOR}"></a>')
        parts.append(self._render_nodes(document.children))
        parts.append(self._render_bibliography(bibliography))
        if html_config.back_to_top:
            parts.append(f'<a class="to-top" href="#{TOP_ANCHOR}">Back to Top</a>')
        return "".join(parts)

    def _render_nodes(self, nodes: list[Node]) -> str:
        return "".join(self.visit(node) for node in nodes)

    # -- blocks ---------------------------------------------------------------

    def visit_paragraph(self, node: Paragraph) -> str:
        return f"<p>{self._render_nodes(node.children)}</p>"

    def visit_header(self, node: Header) -> str:
        anchor = header_anchor(plain_text(node.children).strip(), node.ordinal)
        return (
            f'<h{node.level} tabindex="-1" id="{escape(anchor)}">'
            f"{self._render_nodes(node.children)}</h{node.level}>"
        )

    def visit_list(self, node: List) -> str:
        tag = "ol" if node.ordered else "ul"
        return f"<{tag}>{self._render_nodes(node.items)}</{tag}>"

    def visit_list_item(self, node: ListItem) -> str:
        return f"<li>{self._render_nodes(node.children)}</li>"

    def visit_table(self, node: Table) -> str:
        head = "".join(self._cell(cell, "th") for cell in node.head)
        body = "".join(
            "<tr>" + "".join(self.visit(cell) for cell in row) + "</tr>" for row in node.rows
        )
        return f"<table><thead><tr>{head}</tr></thead><tbody>{body}</tbody></table>"

    def visit_cell(self, node: Cell) -> str:
        return self._cell(node, "td")

    def _cell(self, node: Cell, tag: str) -> str:
        content = self._render_nodes(node.children).replace("\n", "<br/>")
        return f"<{tag}>{content}</{tag}>"

    def visit_block_quote(self, node: BlockQuote) -> str:
        return f"<blockquote>{self._render_nodes(node.children)}</blockquote>"

    def visit_code_block(self, node: CodeBlock) -> str:
        return (
            f'<pre><code class="{self._code_class(node.lang)}">'
            f"{self._highlight(node.raw, node.lang)}</code></pre>"
        )

    def visit_toc(self, node: TableOfContents) -> str:
        if self._toc is None:
            return ""
        title = escape(self.config.html.toc_title)
        return f'<nav class="toc"><h2>{title}</h2>{self._toc_list(self._toc)}</nav>'

    def _toc_list(self, parent: TocNode) -> str:
        items = []
        for child in parent.children:
            sublist = self._toc_list(child) if child.children else ""
            items.append(
                f'<li><a href="#{escape(child.anchor_id)}">{escape(child.title)}</a>{sublist}</li>'
            )
        return f"<ol>{''.join(items)}</ol>"

    def visit_math(self, node: Math) -> str:
        equation = escape(node.equation)
        if node.inline:
            return f'<span class="math math-inline">\\({equation}\\)</span>'
        return f'<div class="math math-block">$${equation}$$</div>'

    def visit_element(self, node: Element) -> str:
        attrs = "".join(
            f' {name}="{escape(" ".join(values))}"'
            for name, values in node.attrs.items()
            if name not in _PARSER_ATTRS
        )
        if node.children is not None:
            return f"<{node.tag}{attrs}>{self._render_nodes(node.children)}</{node.tag}>"
        if node.raw is not None:
            return f"<{node.tag}{attrs}>{escape(node.raw)}</{node.tag}>"
        return f"<{node.tag}{attrs} />"

    def visit_paragraph_break(self, node: ParagraphBreak) -> str:
        return ""

    # -- inline ---------------------------------------------------------------

    def visit_text(self, node: Text) -> str:
        return escape(node.text)

    def visit_inline_code(self, node: InlineCode) -> str:
        lang = node.lang or self.config.html.inline_code_language
        return f'<code class="{self._code_class(lang)}">{self._highlight(node.raw, lang)}</code>'

    def visit_bold(self, node: Bold) -> str:
        return f"<strong>{self._render_nodes(node.children)}</strong>"

    def visit_italic(self, node: Italic) -> str:
        return f"<em>{self._render_nodes(node.children)}</em>"

    def visit_bold_italic(self, node: BoldItalic) -> str:
        return f"<strong><em>{self._render_nodes(node.children)}</em></strong>"

    def visit_link(self, node: Link) -> str:
        return f'<a href="{escape(node.href)}"{self._target()}>{escape(node.text)}</a>'

    def visit_object_link(self, node: ObjectLink) -> str:
        article = self.resolve_article(node.ref_id)
        return f'<a href="{escape(article.uri)}">{escape(article.title)}</a>'

    def visit_citation(self, node: Citation) -> str:
        reference = self.resolve_citation(node.ref_id)
        return (
            f'<sup><a href="#{reference_anchor(reference.id)}" '
            f'aria-label="Reference {reference.ordinal}">{citation_label(reference)}</a></sup>'
        )

    # -- helpers --------------------------------------------------------------

    def _target(self) -> str:
        target = self.config.html.link_target
        return f' target="{escape(target)}" rel="noopener"' if target else ""

    def _code_class(self, lang: Optional[str]) -> str:
        if not lang:
            return "highlight"
        return f"highlight language-{escape(lang)}"

    def _highlight(self, code: str, lang: Optional[str]) -> str:
        """Syntax-highlight code, falling back to escaped text."""
        if not lang or not self.config.html.highlight_code:
            return escape(code)
        try:
            lexer = get_lexer_by_name(lang, stripnl=False, ensurenl=False)
        except ClassNotFound:
            logger.debug("No lexer for language %r; emitting plain code", lang)
            return escape(code)
        return highlight(code, lexer, self._formatter)

    def _render_bibliography(self, bibliography: list[BibliographyEntry]) -> str:
        if not bibliography:
            return ""
        items = []
        for entry in bibliography:
            spans = " ".join(
                f'<span class="ref-{segment.role}">{escape(segment.text)}</span>'
                for segment in entry.segments
            )
            items.append(
                f'<li id="{escape(entry.anchor_id)}">'
                f'<a href="{escape(entry.href or "")}"{self._target()}>{spans}</a></li>'
            )
        title = escape(self.config.html.bibliography_title)
        return (
            f'<section class="bibliography"><h2 tabindex="-1" id="{BIBLIOGRAPHY_ANCHOR}">'
            f"{title}</h2><ul>{''.join(items)}</ul></section>"
        )
