"""
Constants for transcription jobs, emoji conversion and client-side storage.
Voice flow: record -> submit job -> poll every 2s -> convert transcript -> append to log.
"""

from enum import Enum
from typing import Final


class EmojiMode(str, Enum):
    """How much of the input survives as words in the converted output."""

    EMOJI = "emoji"  # pure emoji, no letters
    MIXED = "mixed"  # filler words stay as text, meaningful words become emoji


class JobStatus(str, Enum):
    """Client-facing transcription job status."""

    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not JobStatus.PROCESSING


# Language hint sent with every transcription job; the UI no longer exposes a selector.
DEFAULT_LANGUAGE: Final[str] = "en-US"
# Whisper takes ISO 639-1 codes rather than locale tags.
DEFAULT_WHISPER_LANGUAGE: Final[str] = "en"

POLL_INTERVAL_S: Final[float] = 2.0
# 150 polls at 2s is five minutes; the backend job keeps running after we give up.
POLL_MAX_ATTEMPTS: Final[int] = 150

# Key under which the consent flag is persisted in client-local storage.
CONSENT_STORAGE_KEY: Final[str] = "mojimajic-consent"

# Transcribe job states -> client status. Anything unknown is still processing.
AWS_JOB_STATUSES: Final[dict[str, JobStatus]] = {
    "QUEUED": JobStatus.PROCESSING,
    "IN_PROGRESS": JobStatus.PROCESSING,
    "COMPLETED": JobStatus.COMPLETED,
    "FAILED": JobStatus.FAILED,
}

# Words the mixed style keeps as plain text.
FILLER_WORDS: Final[tuple[str, ...]] = (
    "I", "and", "the", "a", "an", "is", "are", "was", "were", "of", "to", "in",
    "on", "at", "for", "with", "by", "from", "up", "about", "into", "through",
    "during", "before", "after", "above", "below", "between", "among", "he",
    "she", "it", "they", "we", "you", "me", "him", "her", "them", "us",
)


def map_aws_status(raw: str | None) -> JobStatus:
    """Map a Transcribe TranscriptionJobStatus onto processing/completed/failed."""
    if not raw:
        return JobStatus.PROCESSING
    return AWS_JOB_STATUSES.get(raw.upper(), JobStatus.PROCESSING)


def is_text_present(text: str | None) -> bool:
    """True if text has anything left after trimming whitespace."""
    return bool(text and text.strip())
