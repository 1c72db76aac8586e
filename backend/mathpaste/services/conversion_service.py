import asyncio
import logging
from dataclasses import dataclass

from mathpaste.core.compiler.html_builder import build_preview_html, build_word_html
from mathpaste.core.compiler.md2docx import generate_docx
from mathpaste.core.compiler.tokenizer import MathToken, Token, tokenize_and_convert

logger = logging.getLogger(__name__)


@dataclass
class ConversionResult:
    tokens: list[Token]
    preview_html: str
    word_html: str

    @property
    def has_equations(self) -> bool:
        return any(isinstance(t, MathToken) for t in self.tokens)


def convert_text(text: str, run_key: str | None = None) -> ConversionResult:
    """Tokenize *text* and build both HTML renderings."""
    tokens = tokenize_and_convert(text, run_key=run_key)
    result = ConversionResult(
        tokens=tokens,
        preview_html=build_preview_html(tokens),
        word_html=build_word_html(tokens),
    )
    logger.info(
        "Converted %d chars into %d tokens (equations: %s)",
        len(text), len(tokens), result.has_equations,
    )
    return result


async def convert_text_to_docx(text: str) -> bytes:
    tokens = await asyncio.to_thread(tokenize_and_convert, text)
    return await generate_docx(tokens)
