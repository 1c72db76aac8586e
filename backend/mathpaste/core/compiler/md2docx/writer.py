"""Paragraph model → python-docx ``Document``."""

from __future__ import annotations

import logging

from docx import Document
from docx.enum.text import WD_PARAGRAPH_ALIGNMENT
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from lxml import etree

from mathpaste.config import settings
from mathpaste.core.compiler.math_handler import omml_element
from mathpaste.core.compiler.text_utils import latex_math_to_text

from .converter import BreakRun, MathRun, Paragraph, ParagraphKind, TextRun
from .numbering import ListNumbering

logger = logging.getLogger(__name__)

LIST_STYLE = "List Paragraph"


def _set_font(run, font_name: str):
    run.font.name = font_name
    rPr = run._element.get_or_add_rPr()
    rFonts = rPr.find(qn("w:rFonts"))
    if rFonts is None:
        rFonts = OxmlElement("w:rFonts")
        rPr.insert(0, rFonts)
    rFonts.set(qn("w:eastAsia"), font_name)


def _add_bottom_border(paragraph):
    pPr = paragraph._element.get_or_add_pPr()
    pBdr = OxmlElement("w:pBdr")
    bottom = OxmlElement("w:bottom")
    bottom.set(qn("w:val"), "single")
    bottom.set(qn("w:sz"), "6")
    bottom.set(qn("w:space"), "1")
    bottom.set(qn("w:color"), "000000")
    pBdr.append(bottom)
    pPr.append(pBdr)


class DocxWriter:
    """Renders paragraphs into a fresh python-docx document."""

    def __init__(self, monospace_font: str | None = None, math_fallback_font: str | None = None):
        self.doc = Document()
        self.monospace_font = monospace_font or settings.MONOSPACE_FONT
        self.math_fallback_font = math_fallback_font or settings.MATH_FALLBACK_FONT
        self._numbering: ListNumbering | None = None

    @property
    def numbering(self) -> ListNumbering:
        if self._numbering is None:
            self._numbering = ListNumbering(self.doc)
        return self._numbering

    def write(self, paragraphs: list[Paragraph]):
        for para in paragraphs:
            self._write_paragraph(para)
        return self.doc

    def _write_paragraph(self, para: Paragraph):
        kind = para.kind
        if kind == ParagraphKind.HEADING:
            p = self.doc.add_heading("", level=max(1, min(para.heading_level, 6)))
        elif kind == ParagraphKind.LIST_ITEM:
            p = self.doc.add_paragraph(style=LIST_STYLE)
            if para.list_marker is not None:
                self.numbering.apply(p, para.list_marker)
        else:
            p = self.doc.add_paragraph()
            if kind == ParagraphKind.THEMATIC_BREAK:
                _add_bottom_border(p)

        if para.is_display_math:
            p.alignment = WD_PARAGRAPH_ALIGNMENT.CENTER

        monospace = kind == ParagraphKind.PREFORMATTED
        for run in para.runs:
            self._write_run(p, run, monospace=monospace)

    def _write_run(self, paragraph, run, monospace: bool = False):
        if isinstance(run, BreakRun):
            paragraph.add_run().add_break()
        elif isinstance(run, MathRun):
            self._write_math(paragraph, run)
        elif isinstance(run, TextRun):
            r = paragraph.add_run(run.text)
            if run.bold:
                r.bold = True
            if run.italic:
                r.italic = True
            if monospace:
                _set_font(r, self.monospace_font)

    def _write_math(self, paragraph, run: MathRun):
        """Insert native Word math; italic fallback text if the OMML won't parse."""
        try:
            element = omml_element(run.omml)
        except etree.XMLSyntaxError as e:
            logger.warning("Invalid OMML for %r, using text fallback: %s", run.latex, e)
            r = paragraph.add_run(latex_math_to_text(run.latex) or run.latex)
            r.font.name = self.math_fallback_font
            r.italic = True
            return
        paragraph._element.append(element)
