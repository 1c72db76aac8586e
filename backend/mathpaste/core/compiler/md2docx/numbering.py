"""List numbering definitions for generated documents.

Registers one bullet and one decimal ``w:abstractNum`` in
``word/numbering.xml``. All bullet lists share a single ``w:num``; every
ordered list gets its own ``w:num`` with a start override so that separate
lists restart their count.
"""

from __future__ import annotations

import logging

from docx.opc.constants import CONTENT_TYPE as CT
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.opc.packuri import PackURI
from docx.oxml.ns import nsdecls, qn
from docx.oxml.parser import parse_xml
from docx.parts.numbering import NumberingPart

from .converter import ListMarker

logger = logging.getLogger(__name__)

MAX_LEVELS = 9
BULLET_SYMBOLS = ("•", "◦", "▪")
INDENT_STEP = 720  # twips
HANGING = 360


def _abstract_num_xml(abstract_id: int, ordered: bool) -> str:
    levels = []
    for ilvl in range(MAX_LEVELS):
        if ordered:
            num_fmt, lvl_text = "decimal", f"%{ilvl + 1}."
        else:
            num_fmt, lvl_text = "bullet", BULLET_SYMBOLS[ilvl % len(BULLET_SYMBOLS)]
        levels.append(
            f'<w:lvl w:ilvl="{ilvl}">'
            f'<w:start w:val="1"/>'
            f'<w:numFmt w:val="{num_fmt}"/>'
            f'<w:lvlText w:val="{lvl_text}"/>'
            f'<w:lvlJc w:val="left"/>'
            f'<w:pPr><w:ind w:left="{INDENT_STEP * (ilvl + 1)}" w:hanging="{HANGING}"/></w:pPr>'
            f"</w:lvl>"
        )
    return (
        f'<w:abstractNum {nsdecls("w")} w:abstractNumId="{abstract_id}">'
        f'<w:multiLevelType w:val="hybridMultilevel"/>'
        f'{"".join(levels)}'
        f"</w:abstractNum>"
    )


def _numbering_element(doc):
    """Return ``<w:numbering>``, creating the part when the template lacks one."""
    try:
        return doc.part.numbering_part.element
    except NotImplementedError:
        logger.debug("Template has no numbering part, creating one")
        part = NumberingPart(
            PackURI("/word/numbering.xml"),
            CT.WML_NUMBERING,
            parse_xml(f'<w:numbering {nsdecls("w")}/>'),
            doc.part.package,
        )
        doc.part.relate_to(part, RT.NUMBERING)
        return part.element


class ListNumbering:
    """Numbering instances for the lists of one document."""

    def __init__(self, doc):
        self._numbering = _numbering_element(doc)

        existing = [
            int(a.get(qn("w:abstractNumId")))
            for a in self._numbering.iter(qn("w:abstractNum"))
        ]
        self.bullet_abstract_id = max(existing, default=-1) + 1
        self.decimal_abstract_id = self.bullet_abstract_id + 1
        self._insert_abstract(parse_xml(_abstract_num_xml(self.bullet_abstract_id, ordered=False)))
        self._insert_abstract(parse_xml(_abstract_num_xml(self.decimal_abstract_id, ordered=True)))

        self.bullet_num_id = self._add_num(self.bullet_abstract_id)
        self._ordered_num_ids: dict[int, int] = {}

    def _insert_abstract(self, element):
        # abstractNum definitions must precede every w:num
        first_num = self._numbering.find(qn("w:num"))
        if first_num is not None:
            first_num.addprevious(element)
        else:
            self._numbering.append(element)

    def _add_num(self, abstract_id: int, level: int = 0, start: int | None = None) -> int:
        used = [int(n.get(qn("w:numId"))) for n in self._numbering.iter(qn("w:num"))]
        num_id = max(used, default=0) + 1
        override = ""
        if start is not None:
            override = (
                f'<w:lvlOverride w:ilvl="{level}">'
                f'<w:startOverride w:val="{start}"/>'
                f"</w:lvlOverride>"
            )
        self._numbering.append(parse_xml(
            f'<w:num {nsdecls("w")} w:numId="{num_id}">'
            f'<w:abstractNumId w:val="{abstract_id}"/>{override}</w:num>'
        ))
        return num_id

    def num_id_for(self, marker: ListMarker) -> int:
        if not marker.ordered:
            return self.bullet_num_id
        num_id = self._ordered_num_ids.get(marker.list_index)
        if num_id is None:
            num_id = self._add_num(
                self.decimal_abstract_id, min(marker.level, MAX_LEVELS - 1), marker.start,
            )
            self._ordered_num_ids[marker.list_index] = num_id
        return num_id

    def apply(self, paragraph, marker: ListMarker):
        """Attach ``w:numPr`` for *marker* to a python-docx paragraph."""
        num_pr = paragraph._p.get_or_add_pPr().get_or_add_numPr()
        num_pr.get_or_add_ilvl().val = min(marker.level, MAX_LEVELS - 1)
        num_pr.get_or_add_numId().val = self.num_id_for(marker)
