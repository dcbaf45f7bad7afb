"""Typed settings configuration - single source of truth."""

from functools import lru_cache
from pathlib import Path

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Storage (settings.json + extracted document texts)
    data_dir: Path = Path("data")

    # External APIs
    openai_api_key: SecretStr | None = None
    openai_image_model: str = "gpt-image-1"
    openai_vision_model: str = "gpt-4o"

    # Analysis call
    analysis_max_tokens: int = 600
    analysis_temperature: float = 0.4
    analysis_language: str = "English"

    # Per-document excerpt budget for the analysis context (characters)
    doc_excerpt_chars: int = 3000

    # Timeouts (seconds) for upstream image/chat calls and edited-image fetches
    upstream_timeout_sec: float = 120.0
    image_fetch_timeout_sec: float = 30.0

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
