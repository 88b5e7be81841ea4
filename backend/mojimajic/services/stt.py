"""
Synchronous STT (speech-to-text) with Whisper.

Two providers, picked by the ``whisper_provider`` setting:
- "api": hosted whisper-1 through the OpenAI SDK (default).
- "local": openai-whisper on CPU. Optional: ``pip install mojimajic[local-stt]``.
  If not installed, transcribe_audio raises TranscriptionError.
"""

from __future__ import annotations

import logging
from pathlib import Path

from openai import APIError as OpenAIAPIError
from openai import OpenAI

from ..core.config import Settings, get_settings
from ..core.constants import DEFAULT_WHISPER_LANGUAGE
from ..core.exceptions import TranscriptionError

logger = logging.getLogger(__name__)

_whisper_model = None
_openai_client: OpenAI | None = None


def _get_whisper_model(settings: Settings):
    """Lazy-load the local Whisper model. Prefer small models for speed (base or tiny)."""
    global _whisper_model
    if _whisper_model is None:
        try:
            import whisper
        except ImportError as e:
            raise TranscriptionError(
                "Local Whisper not installed. Run: pip install openai-whisper"
            ) from e
        _whisper_model = whisper.load_model(settings.whisper_local_model, device="cpu")
    return _whisper_model


def _get_openai_client(settings: Settings) -> OpenAI:
    global _openai_client
    if _openai_client is None:
        _openai_client = OpenAI(api_key=settings.openai_api_key or None)
    return _openai_client


def _transcribe_local(audio_path: Path, language: str, settings: Settings) -> str:
    model = _get_whisper_model(settings)
    result = model.transcribe(str(audio_path), language=language, fp16=False)
    return result.get("text") or ""


def _transcribe_api(audio_path: Path, language: str, settings: Settings) -> str:
    client = _get_openai_client(settings)
    try:
        with audio_path.open("rb") as f:
            transcription = client.audio.transcriptions.create(
                file=f,
                model=settings.whisper_model,
                language=language,
                response_format="json",
            )
    except OpenAIAPIError as e:
        logger.warning("Whisper API transcription failed", extra={"error": str(e)})
        raise TranscriptionError() from e
    return transcription.text or ""


def transcribe_audio(
    audio_path: Path,
    language: str = DEFAULT_WHISPER_LANGUAGE,
    settings: Settings | None = None,
) -> str:
    """
    Transcribe an audio file to text. Returns trimmed string or empty if nothing recognized.

    Blocking; run it in a thread from async code.
    """
    settings = settings or get_settings()
    provider = settings.whisper_provider.lower()
    if provider == "local":
        text = _transcribe_local(audio_path, language, settings)
    elif provider == "api":
        text = _transcribe_api(audio_path, language, settings)
    else:
        raise TranscriptionError(f"Unknown whisper provider: {settings.whisper_provider!r}")

    text = text.strip()
    logger.info("Whisper transcription done", extra={"provider": provider, "text_length": len(text)})
    return text
