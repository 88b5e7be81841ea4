"""
Application configuration via pydantic-settings.

Values come from the environment or a `.env` file. Use ``get_settings()``
for the cached instance shared by the backend and the session client.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DEFAULT_LANGUAGE, POLL_INTERVAL_S, POLL_MAX_ATTEMPTS


class Settings(BaseSettings):
    """Mojimajic settings. Field names map to env vars (case-insensitive)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- OpenAI ---
    openai_api_key: str = ""
    emoji_model: str = "gpt-4o-mini"
    mixed_emoji_model: str = "gpt-4"
    emoji_temperature: float = 0.7
    emoji_max_tokens: int = 150

    # --- Whisper STT ---
    whisper_provider: str = "api"  # "api" = hosted whisper-1, "local" = openai-whisper on CPU
    whisper_model: str = "whisper-1"
    whisper_local_model: str = "base"

    # --- AWS Transcribe / S3 ---
    aws_region: str = "us-east-1"
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""
    aws_s3_bucket: str = "emoji-transcriptions-career-day"
    transcribe_max_speakers: int = 2
    transcribe_language: str = DEFAULT_LANGUAGE

    # --- Backend ---
    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"
    log_json: bool = True

    # --- Session client ---
    api_base_url: str = "http://localhost:8000"
    api_timeout_s: float = 30.0
    poll_interval_s: float = POLL_INTERVAL_S
    poll_max_attempts: int = POLL_MAX_ATTEMPTS
    storage_path: str = "~/.mojimajic/storage.json"  # stands in for browser localStorage


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings singleton so the .env file is read once."""
    return Settings()
