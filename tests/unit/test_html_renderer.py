"""Tests for the HTML renderer and the renderer base class."""

import pytest

from mml_converter.config import Config, HtmlConfig
from mml_converter.exceptions import ConfigError, UnknownReference, UnresolvedObjectLink
from mml_converter.ir.schema import ArticleRef, Text
from mml_converter.parsers.mml_parser import MmlParser
from mml_converter.renderers import create_renderer
from mml_converter.renderers.base import BaseRenderer
from mml_converter.renderers.html_renderer import HtmlRenderer

REFERENCE_BLOCK = "\n\n@References\n* a\n  | type: web\n  | names: A\n  | link: https://a\n"


@pytest.fixture
def config():
    return Config(html=HtmlConfig(back_to_top=False))


@pytest.fixture
def articles():
    return {"intro": ArticleRef(id="intro", title="Intro <1>", uri="/intro.html")}


@pytest.fixture
def render(config, articles):
    def _render(source, cfg=None):
        document = MmlParser().parse(source)
        return HtmlRenderer(cfg or config, articles).render(document)

    return _render


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------

class TestBlocks:
    def test_paragraph(self, render):
        assert render("hello") == "<p>hello</p>"

    def test_text_is_escaped(self, render):
        assert render("<b> & 'q'") == "<p>&lt;b&gt; &amp; &#x27;q&#x27;</p>"

    def test_header(self, render):
        assert render("# Hello World") == '<h1 tabindex="-1" id="hello-world-1">Hello World</h1>'

    def test_header_anchor_uses_ordinal(self, render):
        html = render("# A\n## A")
        assert 'id="a-1"' in html
        assert 'id="a-2"' in html

    def test_lists(self, render):
        assert render("- a\n- b") == "<ul><li>a</li><li>b</li></ul>"
        assert render("$ a") == "<ol><li>a</li></ol>"

    def test_nested_list(self, render):
        assert render("- a\n  - b") == "<ul><li>a<ul><li>b</li></ul></li></ul>"

    def test_table(self, render):
        assert render("| a |\n|---|\n| x\\ny |") == (
            "<table><thead><tr><th>a</th></tr></thead>"
            "<tbody><tr><td>x<br/>y</td></tr></tbody></table>"
        )

    def test_block_quote(self, render):
        assert render("> q") == "<p><blockquote>q</blockquote></p>"

    def test_toc(self, render):
        html = render("[toc]\n# A\n## B")
        assert html.startswith(
            '<nav class="toc"><h2>Table of Contents</h2>'
            '<ol><li><a href="#a-1">A</a><ol><li><a href="#b-2">B</a></li></ol></li></ol></nav>'
        )

    def test_toc_lists_bibliography(self, render):
        html = render("[toc]\n# A^[a]" + REFERENCE_BLOCK)
        assert '<li><a href="#bibliography">Bibliography</a></li>' in html


# ---------------------------------------------------------------------------
# Code and math
# ---------------------------------------------------------------------------

class TestCode:
    def test_code_block_is_highlighted(self, render):
        html = render("```python\nx = 1\n```")
        assert html.startswith('<pre><code class="highlight language-python">')
        assert '<span class="' in html
        assert html.endswith("</code></pre>")

    def test_unknown_language_is_escaped(self, render):
        html = render("```nosuchlang\n<x>\n```")
        assert html == '<pre><code class="highlight language-nosuchlang">&lt;x&gt;</code></pre>'

    def test_highlighting_disabled(self, render):
        cfg = Config(html=HtmlConfig(back_to_top=False, highlight_code=False))
        html = render("```python\nx < 1\n```", cfg)
        assert html == '<pre><code class="highlight language-python">x &lt; 1</code></pre>'

    def test_inline_code_without_language(self, render):
        assert render("`a<b`") == '<p><code class="highlight">a&lt;b</code></p>'

    def test_inline_code_default_language(self, render):
        cfg = Config(html=HtmlConfig(back_to_top=False, inline_code_language="python"))
        html = render("`x`", cfg)
        assert 'class="highlight language-python"' in html

    def test_math(self, render):
        assert render("\\(a<b\\)") == '<p><span class="math math-inline">\\(a&lt;b\\)</span></p>'
        assert render("$$\nx^2\n$$") == '<p><div class="math math-block">$$x^2$$</div></p>'


# ---------------------------------------------------------------------------
# Elements
# ---------------------------------------------------------------------------

class TestElements:
    def test_element_with_attributes(self, render):
        assert render('~a[href="x"]{t}') == '<p><a href="x">t</a></p>'

    def test_repeated_attribute_values_join(self, render):
        assert render("~span[class=a;class=b]{t}") == '<p><span class="a b">t</span></p>'

    def test_delim_attribute_is_dropped(self, render):
        html = render("~div[delim=end;id=x]\nbody\n~end~")
        assert html == '<p><div id="x">body</div></p>'

    def test_self_closing(self, render):
        assert render("~br~") == "<p><br /></p>"

    def test_verbatim_content_is_escaped(self, render):
        assert render("~pre{<i>*x*</i>}") == "<p><pre>&lt;i&gt;*x*&lt;/i&gt;</pre></p>"

    def test_emphasis(self, render):
        assert render("**b** *i* ***bi***") == (
            "<p><strong>b</strong> <em>i</em> <strong><em>bi</em></strong></p>"
        )


# ---------------------------------------------------------------------------
# Links, citations and bibliography
# ---------------------------------------------------------------------------

class TestLinks:
    def test_link(self, render):
        assert render("(X)[https://x]") == (
            '<p><a href="https://x" target="_blank" rel="noopener">X</a></p>'
        )

    def test_link_without_target(self, render):
        cfg = Config(html=HtmlConfig(back_to_top=False, link_target=""))
        assert render("(X)[https://x]", cfg) == '<p><a href="https://x">X</a></p>'

    def test_object_link(self, render):
        assert render("[[intro]]") == '<p><a href="/intro.html">Intro &lt;1&gt;</a></p>'

    def test_unresolved_object_link(self, render):
        with pytest.raises(UnresolvedObjectLink, match="ghost"):
            render("[[ghost]]")

    def test_citation_and_bibliography(self, render):
        html = render("Cited^[a]." + REFERENCE_BLOCK)
        assert '<sup><a href="#bib-ref-a" aria-label="Reference 1">[1]</a></sup>' in html
        assert html.endswith(
            '<section class="bibliography"><h2 tabindex="-1" id="bibliography">Bibliography</h2>'
            '<ul><li id="bib-ref-a"><a href="https://a" target="_blank" rel="noopener">'
            '<span class="ref-ordinal">[1]</span> <span class="ref-names">A.</span> '
            '<span class="ref-online">[Online].</span> '
            '<span class="ref-link">Available: https://a.</span></a></li></ul></section>'
        )

    def test_unknown_citation(self, render):
        with pytest.raises(UnknownReference):
            render("Cited^[nope].")

    def test_no_bibliography_without_references(self, render):
        assert "bibliography" not in render("plain")


# ---------------------------------------------------------------------------
# Renderer plumbing
# ---------------------------------------------------------------------------

class TestRendererBase:
    def test_back_to_top_links(self, articles):
        html = HtmlRenderer(Config(), articles).render(MmlParser().parse("x"))
        assert html.startswith('<a tabindex="-1" class="anchor" id="top"></a>')
        assert html.endswith('<a class="to-top" href="#top">Back to Top</a>')

    def test_visit_dispatches_on_type(self, config):
        assert HtmlRenderer(config).visit(Text(text="a&b")) == "a&amp;b"

    def test_renderer_missing_a_variant_cannot_be_built(self):
        class Partial(BaseRenderer):
            format_name = "partial"

            def render(self, document, toc=None, bibliography=None):
                return ""

            def visit_text(self, node):
                return node.text

        with pytest.raises(TypeError):
            Partial()

    def test_create_renderer(self):
        renderer = create_renderer("HTML")
        assert isinstance(renderer, HtmlRenderer)
        assert renderer.format_name == "html"

    def test_create_renderer_unknown_format(self):
        with pytest.raises(ConfigError, match="Unknown output format"):
            create_renderer("pdf")
