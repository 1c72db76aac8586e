"""Weave converted math back into markdown-rendered HTML.

Math tokens travel through mistune as opaque placeholders and are swapped for
their final markup after rendering, so markdown never sees LaTeX.
"""

import logging
from typing import Callable

from mathpaste.config import settings
from mathpaste.core.templates.engine import WORD_DOCUMENT_TEMPLATE, render_string

from .markdown_lexer import render_html
from .math_handler import OMML_NS
from .tokenizer import MathToken, Token, combine_tokens, math_placeholder

logger = logging.getLogger(__name__)


def render_markdown_with_placeholders(
    tokens: list[Token],
    replacer: Callable[[MathToken], str],
) -> str:
    """Render *tokens* as HTML, substituting every placeholder via *replacer*."""
    html = render_html(combine_tokens(tokens))
    for tok in tokens:
        if not isinstance(tok, MathToken):
            continue
        placeholder = math_placeholder(tok.id)
        count = html.count(placeholder)
        if count != 1:
            logger.debug("Placeholder for %s occurs %d times in rendered HTML", tok.id, count)
        html = html.replace(placeholder, replacer(tok))
    return html


def build_preview_html(tokens: list[Token]) -> str:
    """HTML fragment with screen-rendered math."""
    return render_markdown_with_placeholders(
        tokens,
        lambda t: f"<div>{t.rendered_html}</div>" if t.display_mode else f"<span>{t.rendered_html}</span>",
    )


def build_word_html(tokens: list[Token], title: str | None = None) -> str:
    """Full HTML document with OMML math, for pasting into Word."""
    body = render_markdown_with_placeholders(
        tokens,
        lambda t: f"<div>{t.omml}</div>" if t.display_mode else t.omml,
    )
    return render_string(WORD_DOCUMENT_TEMPLATE, {
        "math_ns": OMML_NS,
        "title": title or settings.WORD_HTML_TITLE,
        "body": body,
    })
