"""LaTeX math → screen HTML, MathML and OMML.

Conversion path: LaTeX → MathML (via latex2mathml) → OMML (via mathml2omml).
Every step degrades to best-effort text instead of raising, so one bad
formula never blocks the rest of the document.
"""

from __future__ import annotations

import html
import logging
import re
from dataclasses import dataclass
from html.entities import name2codepoint

import latex2mathml.converter
import mathml2omml
from docx.oxml.parser import parse_xml
from lxml import etree

from .text_utils import latex_math_to_text

logger = logging.getLogger(__name__)

MML_NS = "http://www.w3.org/1998/Math/MathML"
OMML_NS = "http://schemas.openxmlformats.org/officeDocument/2006/math"
WML_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"

# m: elements that carry nothing but text (sty is a run property)
_PLAIN_OMML_TAGS = frozenset({"oMath", "r", "t", "rPr", "sty"})

_XML_DECL_RE = re.compile(r"^\s*<\?xml[^>]*\?>\s*")
_TAG_RE = re.compile(r"<[^>]+>")


@dataclass(frozen=True)
class MathMarkup:
    rendered_html: str
    mathml: str
    omml: str


def _display_attr(display_mode: bool) -> str:
    return "block" if display_mode else "inline"


def convert_math(latex: str, display_mode: bool = False) -> MathMarkup:
    """Derive all three representations of one formula.

    latex2mathml runs once; the preview and the OMML both start from its
    output.
    """
    try:
        mathml = _convert_latex(latex, display_mode)
        rendered_html = _preview_html(mathml, latex, display_mode)
    except Exception as e:
        logger.debug("MathML conversion failed for %r: %s", latex, e)
        mathml = _merror_mathml(latex, display_mode)
        rendered_html = _error_span(latex, e)
    omml = mathml_to_omml(mathml)
    return MathMarkup(rendered_html=rendered_html, mathml=mathml, omml=omml)


def _convert_latex(latex: str, display_mode: bool) -> str:
    return latex2mathml.converter.convert(latex, display=_display_attr(display_mode))


def _merror_mathml(latex: str, display_mode: bool) -> str:
    text = html.escape(latex_math_to_text(latex) or latex)
    return (
        f'<math xmlns="{MML_NS}" display="{_display_attr(display_mode)}">'
        f"<merror><mtext>{text}</mtext></merror></math>"
    )


def _error_span(latex: str, exc: Exception) -> str:
    fallback = latex_math_to_text(latex) or latex
    return (
        f'<span class="math-error" title="{html.escape(str(exc))}">'
        f"{html.escape(fallback)}</span>"
    )


def _preview_html(mathml: str, latex: str, display_mode: bool) -> str:
    root = etree.fromstring(mathml.encode("utf-8"))

    semantics = etree.Element(f"{{{MML_NS}}}semantics")
    children = list(root)
    if len(children) == 1:
        semantics.append(children[0])
    else:
        mrow = etree.SubElement(semantics, f"{{{MML_NS}}}mrow")
        mrow.extend(children)
    annotation = etree.SubElement(
        semantics, f"{{{MML_NS}}}annotation", encoding="application/x-tex",
    )
    annotation.text = latex
    root.append(semantics)

    css = "math-render math-display" if display_mode else "math-render"
    return f'<span class="{css}">{etree.tostring(root, encoding="unicode")}</span>'


def render_math_html(latex: str, display_mode: bool = False) -> str:
    """Render *latex* as an HTML fragment for screen preview.

    The formula is emitted as native MathML with the TeX source kept in an
    ``application/x-tex`` annotation. On failure the best-effort text is
    shown in a ``math-error`` span whose title carries the parser message.
    """
    try:
        return _preview_html(_convert_latex(latex, display_mode), latex, display_mode)
    except Exception as e:
        logger.debug("Preview render failed for %r: %s", latex, e)
        return _error_span(latex, e)


def latex_to_mathml(latex: str, display_mode: bool = False) -> str:
    """Convert *latex* to a MathML ``<math>`` string honoring display mode."""
    try:
        return _convert_latex(latex, display_mode)
    except Exception as e:
        logger.debug("MathML conversion failed for %r: %s", latex, e)
        return _merror_mathml(latex, display_mode)


def mathml_to_omml(mathml: str) -> str:
    """Convert a MathML string to an OMML fragment.

    mathml2omml wraps content in single-child ``m:box``/``m:e`` pairs; those
    are unwrapped. Falls back to a single plain ``m:r`` run holding the
    MathML's text.
    """
    try:
        omml = mathml2omml.convert(mathml, name2codepoint)
    except Exception as e:
        logger.debug("OMML conversion failed: %s", e)
        omml = ""
    omml = _XML_DECL_RE.sub("", omml or "").strip()
    if omml:
        return _unwrap_boxes(omml)

    text = html.escape(_mathml_text(mathml), quote=False)
    return f'<m:oMath xmlns:m="{OMML_NS}"><m:r><m:t>{text}</m:t></m:r></m:oMath>'


def _unwrap_boxes(omml: str) -> str:
    """Replace every ``<m:box><m:e>...</m:e></m:box>`` with its content."""
    root = _parse_omml(omml)
    if root is None:
        return omml

    box_tag, e_tag = f"{{{OMML_NS}}}box", f"{{{OMML_NS}}}e"
    for box in list(root.iter(box_tag)):
        children = list(box)
        parent = box.getparent()
        if parent is None or len(children) != 1 or children[0].tag != e_tag:
            continue
        index = parent.index(box)
        parent.remove(box)
        for offset, child in enumerate(list(children[0])):
            parent.insert(index + offset, child)
    return etree.tostring(root, encoding="unicode")


def _mathml_text(mathml: str) -> str:
    try:
        root = etree.fromstring(mathml.encode("utf-8"))
    except etree.XMLSyntaxError:
        return html.unescape(_TAG_RE.sub("", mathml))
    return "".join(root.itertext())


# ---------------------------------------------------------------------------
# OMML helpers (used by the DOCX builder)
# ---------------------------------------------------------------------------

def _ensure_namespaces(omml: str) -> str:
    """Declare ``m:``/``w:`` on the root element when the fragment omits them."""
    omml = _XML_DECL_RE.sub("", omml).strip()
    head_end = omml.find(">")
    if head_end < 0:
        return omml
    head = omml[:head_end]
    decls = ""
    if "xmlns:m=" not in head:
        decls += f' xmlns:m="{OMML_NS}"'
    if "xmlns:w=" not in head:
        decls += f' xmlns:w="{WML_NS}"'
    if not decls:
        return omml
    insert_at = head_end - 1 if head.endswith("/") else head_end
    return omml[:insert_at] + decls + omml[insert_at:]


def _parse_omml(omml: str):
    try:
        return etree.fromstring(_ensure_namespaces(omml).encode("utf-8"))
    except etree.XMLSyntaxError as e:
        logger.debug("Unparseable OMML fragment: %s", e)
        return None


def is_plain_omml(omml: str) -> bool:
    """True when the fragment holds only text runs (no operators or structure)."""
    root = _parse_omml(omml)
    if root is None:
        return False
    for el in root.iter():
        if not isinstance(el.tag, str):
            continue
        qname = etree.QName(el)
        if qname.namespace == OMML_NS and qname.localname not in _PLAIN_OMML_TAGS:
            return False
    return True


def omml_text(omml: str) -> str:
    """Concatenated text of every ``m:t`` element."""
    root = _parse_omml(omml)
    if root is None:
        return ""
    return "".join(t.text or "" for t in root.iter(f"{{{OMML_NS}}}t"))


def omml_element(omml: str):
    """Parse an OMML fragment into a python-docx oxml element."""
    return parse_xml(_ensure_namespaces(omml))
