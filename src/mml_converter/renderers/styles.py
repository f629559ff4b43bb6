"""Word document style management.

Handles heading styles (H1-H6), list styles (bullet/number, levels 1-3),
list numbering definitions and hyperlinks, none of which python-docx
exposes directly.
"""

from __future__ import annotations

from docx import Document
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.oxml import OxmlElement
from docx.oxml.ns import qn

from mml_converter.config import StyleConfig

BULLET_NUM_ID = "100"
NUMBER_NUM_ID = "101"
MAX_LIST_LEVEL = 3


def heading_style_name(config: StyleConfig, level: int) -> str:
    """Return the Word style name for a heading level (e.g. 'Heading 1')."""
    return f"{config.heading_prefix} {level}"


def list_style_name(config: StyleConfig, ordered: bool, level: int = 1) -> str:
    """Return the Word style name for a list item.

    Args:
        config: Style configuration.
        ordered: True for numbered lists, False for bulleted.
        level: Nesting level (1-3). Levels > 1 get ' 2', ' 3' suffix.
    """
    base = config.list_number_style if ordered else config.list_bullet_style
    level = min(level, MAX_LIST_LEVEL)
    if level <= 1:
        return base
    return f"{base} {level}"


def ensure_styles_exist(doc: Document) -> None:
    """Ensure the document has bullet and number list numbering definitions.

    python-docx creates heading styles on demand, but bullet/number list
    styles need abstract numbering definitions to actually render bullets.
    """
    numbering_elem = doc.part.numbering_part._element

    _create_numbering(
        numbering_elem,
        BULLET_NUM_ID,
        formats=["bullet"] * MAX_LIST_LEVEL,
        texts=["•", "○", "▪"],  # bullet, circle, square
    )
    _create_numbering(
        numbering_elem,
        NUMBER_NUM_ID,
        formats=["decimal", "lowerLetter", "lowerRoman"],
        texts=["%1.", "%2.", "%3."],
    )


def _create_numbering(
    numbering_elem, abstract_num_id: str, formats: list[str], texts: list[str]
) -> None:
    """Create an abstract numbering definition and its concrete num."""
    abstract_num = OxmlElement("w:abstractNum")
    abstract_num.set(qn("w:abstractNumId"), abstract_num_id)

    for i, (num_format, text) in enumerate(zip(formats, texts)):
        lvl = OxmlElement("w:lvl")
        lvl.set(qn("w:ilvl"), str(i))

        start = OxmlElement("w:start")
        start.set(qn("w:val"), "1")
        lvl.append(start)

        num_fmt = OxmlElement("w:numFmt")
        num_fmt.set(qn("w:val"), num_format)
        lvl.append(num_fmt)

        lvl_text = OxmlElement("w:lvlText")
        lvl_text.set(qn("w:val"), text)
        lvl.append(lvl_text)

        lvl_jc = OxmlElement("w:lvlJc")
        lvl_jc.set(qn("w:val"), "left")
        lvl.append(lvl_jc)

        ppr = OxmlElement("w:pPr")
        ind = OxmlElement("w:ind")
        ind.set(qn("w:left"), str(720 * (i + 1)))
        ind.set(qn("w:hanging"), "360")
        ppr.append(ind)
        lvl.append(ppr)

        abstract_num.append(lvl)

    numbering_elem.insert(0, abstract_num)

    num = OxmlElement("w:num")
    num.set(qn("w:numId"), abstract_num_id)
    abstract_ref = OxmlElement("w:abstractNumId")
    abstract_ref.set(qn("w:val"), abstract_num_id)
    num.append(abstract_ref)
    numbering_elem.append(num)


def apply_list_numbering(paragraph, ordered: bool, level: int = 1) -> None:
    """Apply <w:numPr> to a paragraph so bullets/numbers actually render.

    Args:
        paragraph: The python-docx paragraph to modify.
        ordered: True for numbered list, False for bullet.
        level: 1-based nesting level (converted to 0-based ilvl).
    """
    num_id = NUMBER_NUM_ID if ordered else BULLET_NUM_ID
    ilvl = min(max(level - 1, 0), MAX_LIST_LEVEL - 1)

    pPr = paragraph._element.get_or_add_pPr()
    numPr = OxmlElement("w:numPr")
    ilvl_elem = OxmlElement("w:ilvl")
    ilvl_elem.set(qn("w:val"), str(ilvl))
    numPr.append(ilvl_elem)
    numId_elem = OxmlElement("w:numId")
    numId_elem.set(qn("w:val"), num_id)
    numPr.append(numId_elem)
    pPr.append(numPr)


def add_hyperlink(paragraph, text: str, url: str):
    """Append an external hyperlink run to a paragraph via OOXML <w:hyperlink>.

    Returns:
        The created <w:hyperlink> element.
    """
    r_id = paragraph.part.relate_to(url, RT.HYPERLINK, is_external=True)

    hyperlink = OxmlElement("w:hyperlink")
    hyperlink.set(qn("r:id"), r_id)

    run = OxmlElement("w:r")
    rPr = OxmlElement("w:rPr")
    r_style = OxmlElement("w:rStyle")
    r_style.set(qn("w:val"), "Hyperlink")
    rPr.append(r_style)
    underline = OxmlElement("w:u")
    underline.set(qn("w:val"), "single")
    rPr.append(underline)
    run.append(rPr)

    text_elem = OxmlElement("w:t")
    text_elem.text = text
    text_elem.set(qn("xml:space"), "preserve")
    run.append(text_elem)

    hyperlink.append(run)
    paragraph._p.append(hyperlink)
    return hyperlink


def doc_style_or_fallback(
    doc: Document, style_name: str, fallback: str = "Normal"
) -> str:
    """Return style_name if it exists in doc, otherwise fallback."""
    try:
        doc.styles[style_name]
        return style_name
    except KeyError:
        return fallback
