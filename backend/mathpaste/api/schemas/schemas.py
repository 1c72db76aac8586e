from typing import Literal

from pydantic import BaseModel


# --- Convert ---
class ConvertRequest(BaseModel):
    text: str


class TokenResponse(BaseModel):
    id: str
    type: Literal["text", "math"]
    text: str | None = None
    latex: str | None = None
    display_mode: bool = False


class ConvertResponse(BaseModel):
    preview_html: str
    word_html: str
    has_equations: bool
    tokens: list[TokenResponse]
