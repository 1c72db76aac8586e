"""Markdown-with-placeholders → paragraph/run model.

Walks mistune's block AST, expands inline children into styled runs and
resolves math placeholders back to their tokens. The result is a plain list
of ``Paragraph`` objects; ``writer.DocxWriter`` turns it into python-docx.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Union

from mathpaste.core.compiler.markdown_lexer import lex_blocks, lex_inline
from mathpaste.core.compiler.math_handler import is_plain_omml, omml_text
from mathpaste.core.compiler.tokenizer import (
    MathToken,
    Token,
    combine_tokens,
    math_tokens_by_id,
    split_by_placeholders,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Document model
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FormatState:
    """Inherited inline formatting."""
    bold: bool = False
    italic: bool = False

    def merge(self, **kwargs) -> "FormatState":
        return replace(self, **kwargs)


@dataclass(frozen=True)
class TextRun:
    text: str
    bold: bool = False
    italic: bool = False


@dataclass(frozen=True)
class MathRun:
    """Native Word equation carrying an OMML fragment verbatim."""
    omml: str
    latex: str = ""
    display: bool = False


@dataclass(frozen=True)
class BreakRun:
    """Hard line break."""


Run = Union[TextRun, MathRun, BreakRun]


class ParagraphKind(str, Enum):
    HEADING = "heading"
    BODY = "body"
    LIST_ITEM = "list_item"
    THEMATIC_BREAK = "thematic_break"
    PREFORMATTED = "preformatted"


@dataclass(frozen=True)
class ListMarker:
    ordered: bool
    level: int = 0        # 0-based nesting depth
    list_index: int = 0   # which list instance the item belongs to
    start: int = 1


@dataclass
class Paragraph:
    kind: ParagraphKind
    runs: list[Run] = field(default_factory=list)
    heading_level: int = 0
    list_marker: ListMarker | None = None

    @property
    def text(self) -> str:
        return "".join(r.text for r in self.runs if isinstance(r, TextRun))

    @property
    def is_display_math(self) -> bool:
        return (
            len(self.runs) == 1
            and isinstance(self.runs[0], MathRun)
            and self.runs[0].display
        )


# ---------------------------------------------------------------------------
# Emphasis-marker splitting
# ---------------------------------------------------------------------------

def emit_styled_runs(text: str, fmt: FormatState) -> list[TextRun]:
    """Split *text* at literal ``**`` / ``*`` markers, toggling bold / italic.

    Markers themselves emit nothing; a run is flushed whenever a toggle
    interrupts the buffered text.
    """
    runs: list[TextRun] = []
    buf: list[str] = []
    bold, italic = fmt.bold, fmt.italic

    def flush():
        if buf:
            runs.append(TextRun("".join(buf), bold=bold, italic=italic))
            buf.clear()

    i = 0
    while i < len(text):
        if text.startswith("**", i):
            flush()
            bold = not bold
            i += 2
            continue
        if text[i] == "*":
            flush()
            italic = not italic
            i += 1
            continue
        buf.append(text[i])
        i += 1
    flush()
    return runs


def _merge_text_nodes(nodes: list[dict[str, Any]]) -> list[dict[str, Any]]:
    merged: list[dict[str, Any]] = []
    for node in nodes:
        if node.get("type") == "text" and merged and merged[-1].get("type") == "text":
            merged[-1] = {"type": "text", "raw": merged[-1].get("raw", "") + node.get("raw", "")}
        else:
            merged.append(node)
    return merged


# ---------------------------------------------------------------------------
# Converter
# ---------------------------------------------------------------------------

class MarkdownToDocxConverter:
    """Converts a token stream into the paragraph model."""

    def __init__(self, tokens: list[Token]):
        self.tokens = tokens
        self.math_by_id = math_tokens_by_id(tokens)
        self.paragraphs: list[Paragraph] = []
        self._list_count = 0

    def convert(self) -> list[Paragraph]:
        self.paragraphs = []
        self._list_count = 0
        for block in lex_blocks(combine_tokens(self.tokens)):
            self._process_block(block)
        logger.debug("Built %d paragraphs from %d tokens", len(self.paragraphs), len(self.tokens))
        return self.paragraphs

    # ── Blocks ───────────────────────────────────────────────────────

    def _process_block(self, tok: dict[str, Any]):
        tp = tok.get("type", "")

        if tp == "heading":
            level = min(int((tok.get("attrs") or {}).get("level", 1)), 6)
            self.paragraphs.append(Paragraph(
                ParagraphKind.HEADING,
                self._inline_runs(self._inline_children(tok)),
                heading_level=level,
            ))
        elif tp == "paragraph":
            self.paragraphs.append(Paragraph(
                ParagraphKind.BODY,
                self._inline_runs(self._inline_children(tok)),
            ))
        elif tp == "list":
            self._add_list(tok, level=0)
        elif tp == "thematic_break":
            self.paragraphs.append(Paragraph(ParagraphKind.THEMATIC_BREAK))
        elif tp == "block_code":
            self._add_code_block(tok.get("raw", ""))
        # blank_line, block_quote, block_html, ...: nothing to emit

    def _inline_children(self, tok: dict[str, Any]) -> list[dict[str, Any]]:
        children = tok.get("children")
        if children:
            return children
        return lex_inline(tok.get("text") or tok.get("raw") or "")

    def _add_list(self, tok: dict[str, Any], level: int):
        attrs = tok.get("attrs") or {}
        self._list_count += 1
        marker = ListMarker(
            ordered=bool(attrs.get("ordered")),
            level=level,
            list_index=self._list_count,
            start=int(attrs.get("start") or 1),
        )

        for item in tok.get("children") or []:
            if item.get("type") != "list_item":
                continue
            runs: list[Run] = []
            trailing: list[dict[str, Any]] = []
            for child in item.get("children") or []:
                ctp = child.get("type", "")
                # tight lists use block_text, loose lists paragraph
                if ctp in ("block_text", "paragraph"):
                    if runs:
                        runs.append(BreakRun())
                    runs.extend(self._inline_runs(self._inline_children(child)))
                elif ctp in ("list", "block_code"):
                    trailing.append(child)

            self.paragraphs.append(Paragraph(ParagraphKind.LIST_ITEM, runs, list_marker=marker))
            for child in trailing:
                if child.get("type") == "list":
                    self._add_list(child, level + 1)
                else:
                    self._add_code_block(child.get("raw", ""))

    def _add_code_block(self, raw: str):
        code = self._restore_math_source(raw)
        if code.endswith("\n"):
            code = code[:-1]
        for line in code.split("\n"):
            self.paragraphs.append(Paragraph(ParagraphKind.PREFORMATTED, [TextRun(line)]))

    def _restore_math_source(self, text: str) -> str:
        """Put the original ``$...$`` source back in place of placeholders."""
        parts = []
        for part in split_by_placeholders(text, self.math_by_id):
            if isinstance(part, MathToken):
                delim = "$$" if part.display_mode else "$"
                parts.append(f"{delim}{part.latex}{delim}")
            else:
                parts.append(part)
        return "".join(parts)

    # ── Inline ───────────────────────────────────────────────────────

    def _inline_runs(self, inline: list[dict[str, Any]], fmt: FormatState | None = None) -> list[Run]:
        fmt = fmt or FormatState()
        runs: list[Run] = []
        for it in inline or []:
            tp = it.get("type", "")
            children = it.get("children")

            if tp == "text":
                runs.extend(self._text_runs(it.get("raw", ""), fmt))
            elif tp == "strong":
                runs.extend(self._inline_runs(children or [], fmt.merge(bold=True)))
            elif tp == "emphasis":
                runs.extend(self._inline_runs(children or [], fmt.merge(italic=True)))
            elif tp == "codespan":
                runs.append(TextRun(self._restore_math_source(it.get("raw", "")), fmt.bold, fmt.italic))
            elif tp == "linebreak":
                runs.append(BreakRun())
            elif tp == "softbreak":
                runs.append(TextRun(" ", fmt.bold, fmt.italic))
            elif tp in ("link", "image"):
                if not children:
                    label = it.get("raw") or (it.get("attrs") or {}).get("url", "")
                    children = [{"type": "text", "raw": label}]
                runs.extend(self._inline_runs(children, fmt))
            elif children:
                runs.extend(self._inline_runs(children, fmt))
        return runs

    def _text_runs(self, text: str, fmt: FormatState) -> list[Run]:
        # A node of bare asterisks (escaped \* or an unmatched marker) has
        # nothing to delimit and is kept as literal text
        if text and not text.strip("*"):
            return [TextRun(text, fmt.bold, fmt.italic)]

        # Re-lex: placeholder joins can leave emphasis markers in plain text
        sub = _merge_text_nodes(lex_inline(text))
        if not (len(sub) == 1 and sub[0].get("type") == "text"):
            return self._inline_runs(sub, fmt)

        runs: list[Run] = []
        for part in split_by_placeholders(sub[0].get("raw", ""), self.math_by_id):
            if isinstance(part, MathToken):
                runs.extend(self._math_runs(part, fmt))
            elif part:
                runs.extend(emit_styled_runs(part, fmt))
        return runs

    def _math_runs(self, tok: MathToken, fmt: FormatState) -> list[Run]:
        # A bare variable reads better as text than as a detached equation
        if is_plain_omml(tok.omml):
            text = omml_text(tok.omml)
            return [TextRun(text, fmt.bold, fmt.italic)] if text else []
        return [MathRun(omml=tok.omml, latex=tok.latex, display=tok.display_mode)]
