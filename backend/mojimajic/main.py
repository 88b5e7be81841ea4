import asyncio
import logging
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from fastapi import Depends, FastAPI, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .core.config import get_settings
from .core.constants import DEFAULT_LANGUAGE, DEFAULT_WHISPER_LANGUAGE, JobStatus, is_text_present
from .core.exceptions import MojimajicError
from .core.logging import setup_logging
from .dependencies import get_emoji_converter, get_transcribe_service
from .models.api import (
    EmojiRequest,
    EmojiResponse,
    HealthResponse,
    TranscriptionJobResponse,
    TranscriptionStatusResponse,
    WhisperTranscriptionResponse,
)
from .services.emoji import EmojiConverter
from .services.stt import transcribe_audio
from .services.transcribe import TranscribeJobService

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Mojimajic Backend")

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@app.exception_handler(MojimajicError)
async def mojimajic_error_handler(_request: Request, exc: MojimajicError) -> JSONResponse:
    """Domain errors become a {detail, code, timestamp} envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": exc.code, "timestamp": exc.timestamp},
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc), "code": "VALIDATION_ERROR", "timestamp": _now()},
    )


@app.exception_handler(Exception)
async def generic_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Catch-all: no stack traces to clients."""
    logger.exception("Unhandled error", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "code": "INTERNAL_ERROR", "timestamp": _now()},
    )


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse()


@app.post("/transcribe", response_model=TranscriptionJobResponse)
async def submit_transcription(
    audio: UploadFile | None = File(None),
    language: str = Form(DEFAULT_LANGUAGE),
    service: TranscribeJobService = Depends(get_transcribe_service),
) -> TranscriptionJobResponse:
    """
    Upload recorded audio and start an asynchronous transcription job.
    Returns { "jobId": "...", "status": "processing" }; poll /transcribe/status with the id.
    """
    if audio is None:
        raise HTTPException(status_code=400, detail="No audio file provided")
    content = await audio.read()
    if not content:
        raise HTTPException(status_code=400, detail="No audio file provided")

    job_id = await asyncio.to_thread(service.start_job, content, language)
    return TranscriptionJobResponse(job_id=job_id, status=JobStatus.PROCESSING)


@app.get(
    "/transcribe/status",
    response_model=TranscriptionStatusResponse,
    response_model_exclude_none=True,
)
async def transcription_status(
    job_id: str | None = Query(None, alias="jobId"),
    service: TranscribeJobService = Depends(get_transcribe_service),
) -> TranscriptionStatusResponse:
    """
    Check a transcription job once. Clients call this every 2 seconds until
    status is completed or failed.
    """
    if not job_id:
        raise HTTPException(status_code=400, detail="No job ID provided")

    result = await asyncio.to_thread(service.get_status, job_id)
    if result.status is JobStatus.COMPLETED:
        return TranscriptionStatusResponse(
            status=result.status,
            transcript=result.transcript,
            language_codes=result.language_codes,
        )
    if result.status is JobStatus.FAILED:
        return TranscriptionStatusResponse(status=result.status, error=result.error)
    return TranscriptionStatusResponse(status=result.status)


@app.post("/transcribe/whisper", response_model=WhisperTranscriptionResponse)
async def transcribe_whisper(
    file: UploadFile = File(...),
    language: str = Form(DEFAULT_WHISPER_LANGUAGE),
) -> WhisperTranscriptionResponse:
    """
    Transcribe uploaded audio synchronously with Whisper. Accepts WAV, WebM, MP3, etc.
    Returns { "text": "..." }.
    """
    suffix = Path(file.filename or "audio").suffix or ".wav"
    try:
        content = await file.read()
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to read audio: {e}") from e
    if not content:
        return WhisperTranscriptionResponse(text="")

    with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as tmp:
        tmp.write(content)
        path = Path(tmp.name)
    try:
        text = await asyncio.to_thread(transcribe_audio, path, language)
    finally:
        path.unlink(missing_ok=True)
    return WhisperTranscriptionResponse(text=text)


@app.post("/emojis", response_model=EmojiResponse)
async def convert_emojis(
    payload: EmojiRequest,
    converter: EmojiConverter = Depends(get_emoji_converter),
) -> EmojiResponse:
    """
    Convert text to emojis. mode "emoji" answers with emojis only, "mixed"
    keeps filler words as text.
    """
    if not is_text_present(payload.text):
        raise HTTPException(status_code=400, detail="No text provided")

    emojis = await converter.convert(payload.text, mode=payload.mode, languages=payload.languages)
    return EmojiResponse(emojis=emojis)
