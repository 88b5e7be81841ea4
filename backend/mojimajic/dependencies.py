"""Provider singletons for the routes. Tests swap them via app.dependency_overrides."""

from functools import lru_cache

from .services.emoji import EmojiConverter
from .services.transcribe import TranscribeJobService


@lru_cache
def get_transcribe_service() -> TranscribeJobService:
    """Returns the S3 + Transcribe job service."""
    return TranscribeJobService()


@lru_cache
def get_emoji_converter() -> EmojiConverter:
    """Returns the OpenAI-backed emoji converter."""
    return EmojiConverter()
