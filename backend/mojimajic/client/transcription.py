"""
Transcription job client: submit audio, then poll until the job is terminal.

Polling runs on a fixed interval with an upper bound on attempts and an
optional cancellation event. Giving up only stops the client; the backend
job keeps running and is orphaned.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from ..core.config import get_settings
from ..core.constants import DEFAULT_LANGUAGE, JobStatus
from ..core.exceptions import APIError, PollingCancelled, PollingFailure, PollingTimeout, SubmissionError
from .api_client import MojimajicAPI

logger = logging.getLogger(__name__)


@dataclass
class TranscriptionJob:
    """Client-side view of one job. Discarded once terminal."""

    job_id: str
    status: JobStatus = JobStatus.PROCESSING
    language_codes: list[str] = field(default_factory=list)
    transcript: str | None = None
    error: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


def _parse_status(job_id: str, data: dict) -> TranscriptionJob:
    try:
        status = JobStatus(data.get("status", JobStatus.PROCESSING.value))
    except ValueError:
        # Raw provider states (QUEUED, IN_PROGRESS) mean still processing.
        status = JobStatus.PROCESSING
    return TranscriptionJob(
        job_id=job_id,
        status=status,
        language_codes=list(data.get("languageCodes") or []),
        transcript=data.get("transcript"),
        error=data.get("error"),
    )


class TranscriptionJobClient:
    def __init__(
        self,
        api: MojimajicAPI,
        poll_interval: float | None = None,
        max_attempts: int | None = None,
    ) -> None:
        settings = get_settings()
        self._api = api
        self.poll_interval = settings.poll_interval_s if poll_interval is None else poll_interval
        self.max_attempts = settings.poll_max_attempts if max_attempts is None else max_attempts

    async def submit(self, audio: bytes, language: str = DEFAULT_LANGUAGE) -> TranscriptionJob:
        """Start a job for the audio payload. Raises SubmissionError if the backend refuses it."""
        try:
            data = await self._api.submit_transcription(audio, language=language)
        except APIError as e:
            logger.warning("Transcription submission rejected", extra={"category": e.category})
            raise SubmissionError(e.detail) from e

        job_id = data.get("jobId")
        if not job_id:
            raise SubmissionError("Backend returned no job id")
        logger.info("Transcription job submitted", extra={"job_id": job_id})
        return TranscriptionJob(job_id=job_id)

    async def poll_status(self, job_id: str) -> TranscriptionJob:
        """One status query. Raises PollingFailure if the query itself fails."""
        try:
            data = await self._api.transcription_status(job_id)
        except APIError as e:
            logger.warning("Status query failed", extra={"job_id": job_id, "category": e.category})
            raise PollingFailure(e.detail) from e
        return _parse_status(job_id, data)

    async def wait_for_completion(
        self,
        job_id: str,
        cancel: asyncio.Event | None = None,
    ) -> TranscriptionJob:
        """
        Poll every ``poll_interval`` seconds until completed or failed.

        Raises PollingTimeout after ``max_attempts`` non-terminal polls and
        PollingCancelled as soon as ``cancel`` is set.
        """
        for attempt in range(1, self.max_attempts + 1):
            if cancel is not None and cancel.is_set():
                raise PollingCancelled(job_id)

            job = await self.poll_status(job_id)
            if job.is_terminal:
                logger.info(
                    "Transcription job finished",
                    extra={"job_id": job_id, "status": job.status.value, "attempts": attempt},
                )
                return job

            if attempt == self.max_attempts:
                break
            if await self._sleep(cancel):
                raise PollingCancelled(job_id)

        logger.warning("Gave up polling transcription job", extra={"job_id": job_id})
        raise PollingTimeout(job_id, self.max_attempts)

    async def _sleep(self, cancel: asyncio.Event | None) -> bool:
        """Wait one interval. Returns True if cancelled meanwhile."""
        if cancel is None:
            await asyncio.sleep(self.poll_interval)
            return False
        try:
            await asyncio.wait_for(cancel.wait(), timeout=self.poll_interval)
        except asyncio.TimeoutError:
            return False
        return True
