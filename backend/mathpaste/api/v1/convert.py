import asyncio
import logging

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response

from mathpaste.api.schemas.schemas import ConvertRequest, ConvertResponse, TokenResponse
from mathpaste.config import settings
from mathpaste.core.compiler.tokenizer import MathToken, Token
from mathpaste.services import conversion_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["convert"])

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def _check_size(text: str):
    if len(text) > settings.MAX_INPUT_CHARS:
        raise HTTPException(
            status_code=413,
            detail=f"Input too large ({len(text)} > {settings.MAX_INPUT_CHARS} characters)",
        )


def _token_response(tok: Token) -> TokenResponse:
    if isinstance(tok, MathToken):
        return TokenResponse(id=tok.id, type="math", latex=tok.latex, display_mode=tok.display_mode)
    return TokenResponse(id=tok.id, type="text", text=tok.text)


@router.post("/convert", response_model=ConvertResponse)
async def convert(data: ConvertRequest):
    _check_size(data.text)
    result = await asyncio.to_thread(conversion_service.convert_text, data.text)
    return ConvertResponse(
        preview_html=result.preview_html,
        word_html=result.word_html,
        has_equations=result.has_equations,
        tokens=[_token_response(t) for t in result.tokens],
    )


@router.post("/convert/docx")
async def convert_docx(data: ConvertRequest):
    _check_size(data.text)
    content = await conversion_service.convert_text_to_docx(data.text)
    logger.info("Generated DOCX (%d bytes)", len(content))
    return Response(
        content=content,
        media_type=DOCX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{settings.DOCX_FILENAME}"'},
    )
