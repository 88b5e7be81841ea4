"""
Mojimajic exception hierarchy.

Everything raised on purpose inherits from MojimajicError so the backend can
turn it into a JSON envelope and the session client can turn it into a
notification or a log entry.
"""

from datetime import datetime, timezone


class MojimajicError(Exception):
    """Base exception for all Mojimajic errors."""

    def __init__(
        self,
        detail: str = "An unexpected error occurred",
        code: str = "MOJIMAJIC_ERROR",
        status_code: int = 500,
    ) -> None:
        self.detail = detail
        self.code = code
        self.status_code = status_code
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(detail)


# --- Microphone ---


class PermissionDenied(MojimajicError):
    """The host refused microphone access."""

    def __init__(self, detail: str = "Microphone permission denied") -> None:
        super().__init__(detail=detail, code="PERMISSION_DENIED", status_code=403)


class DeviceUnavailable(MojimajicError):
    """No usable input device."""

    def __init__(self, detail: str = "No microphone available") -> None:
        super().__init__(detail=detail, code="DEVICE_UNAVAILABLE", status_code=503)


class RecordingInProgressError(MojimajicError):
    """Raised when an action needs the recorder idle but a recording is active."""

    def __init__(self) -> None:
        super().__init__(
            detail="A recording is already active",
            code="RECORDING_IN_PROGRESS",
            status_code=409,
        )


# --- Transcription ---


class SubmissionError(MojimajicError):
    """The transcription backend rejected the audio payload."""

    def __init__(self, detail: str = "Failed to start transcription job") -> None:
        super().__init__(detail=detail, code="SUBMISSION_ERROR", status_code=502)


class PollingFailure(MojimajicError):
    """A transcription job failed or its status could not be queried."""

    def __init__(self, detail: str = "Failed to check transcription status") -> None:
        super().__init__(detail=detail, code="POLLING_FAILURE", status_code=502)


class PollingTimeout(PollingFailure):
    """The job never reached a terminal status within the polling bound."""

    def __init__(self, job_id: str, attempts: int) -> None:
        self.job_id = job_id
        self.attempts = attempts
        super().__init__(f"Transcription job {job_id} still processing after {attempts} polls")
        self.code = "POLLING_TIMEOUT"


class PollingCancelled(MojimajicError):
    """The poll loop was abandoned by the client. The backend job is untouched."""

    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        super().__init__(
            detail=f"Stopped polling transcription job {job_id}",
            code="POLLING_CANCELLED",
            status_code=499,
        )


class TranscriptionError(MojimajicError):
    """Synchronous speech-to-text failed."""

    def __init__(self, detail: str = "Failed to transcribe audio") -> None:
        super().__init__(detail=detail, code="TRANSCRIPTION_ERROR", status_code=502)


# --- Emoji conversion ---


class ConversionError(MojimajicError):
    """The language-model backend did not return an emoji rendering."""

    def __init__(self, detail: str = "Failed to convert text to emojis") -> None:
        super().__init__(detail=detail, code="CONVERSION_ERROR", status_code=502)


# --- Client side ---


class ClipboardError(MojimajicError):
    """The platform denied clipboard access."""

    def __init__(self, detail: str = "Failed to copy emojis") -> None:
        super().__init__(detail=detail, code="CLIPBOARD_ERROR", status_code=500)


class APIError(MojimajicError):
    """Backend HTTP call failed.

    ``category`` is one of "connection", "timeout", "http", "network" so the
    caller can pick a message. ``status_code`` is the HTTP status for "http".
    """

    def __init__(self, detail: str, category: str = "network", status_code: int = 0) -> None:
        self.category = category
        super().__init__(detail=detail, code="API_ERROR", status_code=status_code)
