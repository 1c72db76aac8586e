from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/mathpaste.log"  # empty string disables the file handler

    DOCX_FILENAME: str = "equations.docx"
    MAX_INPUT_CHARS: int = 200_000

    WORD_HTML_TITLE: str = "Equations"
    MONOSPACE_FONT: str = "Courier New"
    MATH_FALLBACK_FONT: str = "Cambria Math"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
