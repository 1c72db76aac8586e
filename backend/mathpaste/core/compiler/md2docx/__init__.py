"""Markdown + math tokens → DOCX.

Public API: ``convert_tokens_to_docx()`` and its async wrapper
``generate_docx()``.

The token stream is re-assembled into placeholder markdown, lexed with
mistune, turned into a paragraph/run model and written with python-docx.
Math stays native: each formula's OMML is appended to its paragraph.
"""

import asyncio
import io
import logging
from pathlib import Path

from mathpaste.core.compiler.tokenizer import Token

from .converter import MarkdownToDocxConverter, Paragraph
from .writer import DocxWriter

logger = logging.getLogger(__name__)


def build_paragraphs(tokens: list[Token]) -> list[Paragraph]:
    return MarkdownToDocxConverter(tokens).convert()


def build_document(tokens: list[Token]):
    """Build an in-memory python-docx ``Document`` for *tokens*."""
    return DocxWriter().write(build_paragraphs(tokens))


def convert_tokens_to_docx(tokens: list[Token], output_path: str | Path | None = None) -> bytes:
    """Serialize *tokens* to DOCX bytes, optionally also writing *output_path*."""
    doc = build_document(tokens)
    buffer = io.BytesIO()
    doc.save(buffer)
    data = buffer.getvalue()

    if output_path is not None:
        output_path = Path(output_path)
        output_path.write_bytes(data)
        logger.info("Saved DOCX to %s", output_path)
    return data


async def generate_docx(tokens: list[Token]) -> bytes:
    """Build the DOCX off the event loop."""
    return await asyncio.to_thread(convert_tokens_to_docx, tokens)
