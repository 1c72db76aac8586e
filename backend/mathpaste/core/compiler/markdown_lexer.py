"""mistune-backed markdown lexing.

Three entry points share one dialect (no plugins, raw HTML passed through):

* ``render_html`` for the HTML outputs,
* ``lex_blocks`` for the block-level AST the DOCX builder walks,
* ``lex_inline`` for re-lexing a single text node as inline markdown.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

import mistune

logger = logging.getLogger(__name__)

InlineLexer = Callable[[str], list[dict[str, Any]]]

_html_markdown = mistune.create_markdown(escape=False)
_ast_markdown = mistune.create_markdown(escape=False, renderer="ast")


def render_html(text: str) -> str:
    return _html_markdown(text)


def lex_blocks(text: str) -> list[dict[str, Any]]:
    """Block tokens (heading, paragraph, list, ...) with inline ``children``."""
    return _ast_markdown(text)


def get_inline_lexer() -> InlineLexer | None:
    """Return an inline-only lexer, or None when this mistune build has none."""
    inline = getattr(_ast_markdown, "inline", None)
    if not callable(inline):
        return None

    def _lex(text: str) -> list[dict[str, Any]]:
        return inline(text, {"ref_links": {}})

    return _lex


def lex_inline(text: str) -> list[dict[str, Any]]:
    """Lex *text* as inline markdown, degrading to one plain text node."""
    lexer = get_inline_lexer()
    if lexer is not None:
        try:
            return lexer(text)
        except Exception as e:
            logger.debug("Inline lexing failed, keeping plain text: %s", e)
    return [{"type": "text", "raw": text}]
