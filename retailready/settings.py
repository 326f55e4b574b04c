"""
Runtime configuration for the RetailReady service.

Environment-driven (prefix RETAILREADY_, optional .env file) and read-only
at runtime. Scoring thresholds and fine patterns are not settings: they live
in the immutable RiskConfig / FineConfig values next to the code that uses
them.
"""

from functools import lru_cache
from typing import Annotated, Optional

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # ---------------------------
    # LLM extraction
    # ---------------------------

    openai_api_key: Annotated[
        Optional[SecretStr],
        Field(
            default=None,
            validation_alias=AliasChoices("RETAILREADY_OPENAI_API_KEY", "OPENAI_API_KEY"),
            description="API key for the extraction model, redacted from logs",
        ),
    ]
    openai_model: str = "gpt-4o-mini"
    openai_temperature: Annotated[float, Field(default=0.1, ge=0.0, le=2.0)]
    openai_timeout_seconds: Annotated[float, Field(default=60.0, gt=0)]

    # ---------------------------
    # Document handling
    # ---------------------------

    max_text_length: Annotated[
        int,
        Field(
            default=50000,
            ge=1,
            description="Document characters forwarded to the extraction prompt",
        ),
    ]
    # Below this many characters of PDF text, try OCR instead
    ocr_min_chars: int = 350
    ocr_max_pages: Annotated[int, Field(default=3, ge=1)]

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="RETAILREADY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
