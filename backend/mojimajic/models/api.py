from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..core.constants import EmojiMode, JobStatus


class CamelModel(BaseModel):
    """Wire models use camelCase field names (jobId, languageCodes)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TranscriptionJobResponse(CamelModel):
    """Returned when a transcription job has been submitted."""

    job_id: str
    status: JobStatus = JobStatus.PROCESSING


class TranscriptionStatusResponse(CamelModel):
    """One poll result. transcript/languageCodes only when completed, error only when failed."""

    status: JobStatus
    transcript: str | None = None
    language_codes: list[str] | None = None
    error: str | None = None


class WhisperTranscriptionResponse(CamelModel):
    """Response from the synchronous speech-to-text endpoint."""

    text: str


class EmojiRequest(CamelModel):
    """Text to convert. languages is an optional hint for the mixed style."""

    text: str
    mode: EmojiMode = EmojiMode.EMOJI
    languages: list[str] = Field(default_factory=list)


class EmojiResponse(CamelModel):
    emojis: str


class HealthResponse(CamelModel):
    status: str = "ok"
