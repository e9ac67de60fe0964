from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Public OCR.space key; works without registration but is heavily rate-limited.
DEFAULT_OCR_API_KEY = "helloworld"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="CARDSCAN_", env_file=".env", extra="ignore", frozen=True)

    APP_NAME: str = Field(default="cardscan")
    ENV: str = Field(default="dev")
    LOG_LEVEL: str = Field(default="INFO")

    # OCR.space
    OCR_SPACE_API_KEY: str | None = Field(
        default=None,
        validation_alias=AliasChoices("CARDSCAN_OCR_SPACE_API_KEY", "OCR_SPACE_API_KEY"),
    )
    OCR_BASE_URL: str = Field(default="https://api.ocr.space/parse/image")
    OCR_LANGUAGE: str = Field(default="eng")
    OCR_TIMEOUT_SECONDS: float = Field(default=60.0)
    OCR_VERIFY_SSL: bool = Field(default=True)
    # Dev only: when set and no API key is configured, OCR is served from this text.
    OCR_FAKE_TEXT: str | None = Field(default=None)

    # Completions gateway
    LLM_BASE_URL: str | None = Field(default=None)
    LLM_MODEL: str = Field(default="gpt-4o")
    LLM_TEMPERATURE: float = Field(default=0.1)
    LLM_MAX_TOKENS: int = Field(default=800)
    LLM_TIMEOUT_SECONDS: float = Field(default=60.0)
    LLM_VERIFY_SSL: bool = Field(default=True)

    STAGE_TIMEOUT_SECONDS: float | None = Field(default=90.0)
    MAX_UPLOAD_MB: int = Field(default=10)
    CAMERA_DEVICE: int = Field(default=0)
    # TrueType font for PDF exports; non-Latin names need a Unicode font.
    PDF_FONT_PATH: str | None = Field(default=None)

    @property
    def uses_default_ocr_key(self) -> bool:
        key = (self.OCR_SPACE_API_KEY or "").strip()
        return not key or key == DEFAULT_OCR_API_KEY

    @property
    def effective_ocr_api_key(self) -> str:
        return (self.OCR_SPACE_API_KEY or "").strip() or DEFAULT_OCR_API_KEY


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
