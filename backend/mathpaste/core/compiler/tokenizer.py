"""Split mixed markdown/LaTeX input into text and math tokens.

``tokenize_and_convert`` is the entry point of the pipeline: every math span
is converted once here and the resulting tokens are shared by the HTML
weaver and the DOCX builder through the placeholder scheme below.
"""

from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass
from typing import Literal, Union

from .math_handler import convert_math
from .text_utils import normalize_accents

logger = logging.getLogger(__name__)

# $$...$$ first so "$$" never reads as two empty inline spans
_MATH_SPAN_RE = re.compile(r"\$\$([\s\S]+?)\$\$|\$([^\n$]+?)\$")

_PLACEHOLDER_START = "MATHPH"
_PLACEHOLDER_END = "PHMATH"
_PLACEHOLDER_RE = re.compile(f"{_PLACEHOLDER_START}(.+?){_PLACEHOLDER_END}")


@dataclass(frozen=True)
class Segment:
    kind: Literal["text", "latex"]
    content: str
    display_mode: bool = False


@dataclass(frozen=True)
class TextToken:
    id: str
    text: str


@dataclass(frozen=True)
class MathToken:
    id: str
    latex: str
    display_mode: bool
    rendered_html: str
    mathml: str
    omml: str


Token = Union[TextToken, MathToken]


def segment(text: str) -> list[Segment]:
    """Scan *text* left to right for ``$$...$$`` and ``$...$`` spans.

    Unterminated delimiters are not math and stay in the surrounding text
    segment, dollar signs included. Empty gaps are omitted.
    """
    segments: list[Segment] = []
    last = 0
    for m in _MATH_SPAN_RE.finditer(text):
        if m.start() > last:
            segments.append(Segment("text", text[last:m.start()]))
        is_block = m.group(1) is not None
        content = m.group(1) if is_block else m.group(2)
        segments.append(Segment("latex", content, display_mode=is_block))
        last = m.end()
    if last < len(text):
        segments.append(Segment("text", text[last:]))
    return segments


def tokenize_and_convert(text: str, run_key: str | None = None) -> list[Token]:
    """Normalize, segment and convert *text* into an ordered token list.

    Ids share one counter (``t-0-<key>``, ``m-1-<key>``, ...). *run_key*
    defaults to a fresh random hex string so placeholders of different runs
    never match each other or stray user text.
    """
    key = run_key or uuid.uuid4().hex[:12]
    normalized = normalize_accents(text)

    tokens: list[Token] = []
    for i, seg in enumerate(segment(normalized)):
        if seg.kind == "text":
            tokens.append(TextToken(id=f"t-{i}-{key}", text=seg.content))
            continue
        latex = normalize_accents(seg.content)
        markup = convert_math(latex, seg.display_mode)
        tokens.append(MathToken(
            id=f"m-{i}-{key}",
            latex=latex,
            display_mode=seg.display_mode,
            rendered_html=markup.rendered_html,
            mathml=markup.mathml,
            omml=markup.omml,
        ))

    logger.debug(
        "Tokenized %d chars into %d tokens (%d math)",
        len(text), len(tokens), sum(isinstance(t, MathToken) for t in tokens),
    )
    return tokens


# ---------------------------------------------------------------------------
# Placeholder scheme
# ---------------------------------------------------------------------------

def math_placeholder(token_id: str) -> str:
    return f"{_PLACEHOLDER_START}{token_id}{_PLACEHOLDER_END}"


def combine_tokens(tokens: list[Token]) -> str:
    """Join tokens into one markdown string with math replaced by placeholders.

    Display math is fenced by blank lines so markdown treats it as its own
    block.
    """
    parts = []
    for tok in tokens:
        if isinstance(tok, TextToken):
            parts.append(tok.text)
        elif tok.display_mode:
            parts.append(f"\n\n{math_placeholder(tok.id)}\n\n")
        else:
            parts.append(math_placeholder(tok.id))
    return "".join(parts)


def split_by_placeholders(
    text: str, math_by_id: dict[str, MathToken],
) -> list[str | MathToken]:
    """Split *text* into literal slices and the math tokens it references.

    Placeholders with an unknown id are dropped.
    """
    result: list[str | MathToken] = []
    last = 0
    for m in _PLACEHOLDER_RE.finditer(text):
        if m.start() > last:
            result.append(text[last:m.start()])
        tok = math_by_id.get(m.group(1))
        if tok is not None:
            result.append(tok)
        last = m.end()
    if last < len(text):
        result.append(text[last:])
    return result


def math_tokens_by_id(tokens: list[Token]) -> dict[str, MathToken]:
    return {t.id: t for t in tokens if isinstance(t, MathToken)}
