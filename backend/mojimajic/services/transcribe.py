"""
Asynchronous transcription jobs on AWS Transcribe.

Submission uploads the audio to S3 and starts a job; status queries map the
job state onto processing/completed/failed and, once completed, read the
transcript JSON that Transcribe wrote back to the bucket.

boto3 is blocking, so the routes call these methods through a thread.
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from dataclasses import dataclass, field
from urllib.parse import urlparse

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..core.config import Settings, get_settings
from ..core.constants import DEFAULT_LANGUAGE, JobStatus, map_aws_status
from ..core.exceptions import PollingFailure, SubmissionError

logger = logging.getLogger(__name__)


@dataclass
class JobStatusResult:
    """Outcome of one status query."""

    status: JobStatus
    transcript: str | None = None
    language_codes: list[str] = field(default_factory=list)
    error: str | None = None


def parse_transcript_uri(uri: str) -> tuple[str, str]:
    """
    Split a transcript location into (bucket, key).

    Transcribe reports either ``s3://bucket/key`` or a path-style
    ``https://s3.<region>.amazonaws.com/bucket/key`` URL.
    """
    parsed = urlparse(uri)
    if parsed.scheme == "s3":
        bucket, key = parsed.netloc, parsed.path.lstrip("/")
    elif parsed.scheme in ("http", "https"):
        parts = [p for p in parsed.path.split("/") if p]
        if len(parts) < 2:
            raise ValueError(f"Invalid transcript URL: {uri!r}")
        bucket, key = parts[0], "/".join(parts[1:])
    else:
        raise ValueError(f"Unsupported transcript URI: {uri!r}")
    if not bucket or not key:
        raise ValueError(f"Invalid S3 URI format: {uri!r}")
    return bucket, key


def _unique_suffix() -> str:
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"


class TranscribeJobService:
    """S3 + Transcribe wrapper. Clients are injectable for tests."""

    def __init__(self, s3_client=None, transcribe_client=None, settings: Settings | None = None):
        self._settings = settings or get_settings()
        session_kwargs = {"region_name": self._settings.aws_region}
        if self._settings.aws_access_key_id:
            session_kwargs["aws_access_key_id"] = self._settings.aws_access_key_id
            session_kwargs["aws_secret_access_key"] = self._settings.aws_secret_access_key
        self._s3 = s3_client or boto3.client("s3", **session_kwargs)
        self._transcribe = transcribe_client or boto3.client("transcribe", **session_kwargs)

    @property
    def bucket(self) -> str:
        return self._settings.aws_s3_bucket

    def start_job(self, audio: bytes, language: str = DEFAULT_LANGUAGE) -> str:
        """
        Upload audio and start a transcription job. Returns the job name.

        Raises SubmissionError when the payload is empty or AWS rejects either call.
        """
        if not audio:
            raise SubmissionError("No audio file provided")

        suffix = _unique_suffix()
        key = f"audio-{suffix}.wav"
        job_name = f"transcription-{suffix}"
        try:
            self._s3.put_object(Bucket=self.bucket, Key=key, Body=audio, ContentType="audio/wav")
            response = self._transcribe.start_transcription_job(
                TranscriptionJobName=job_name,
                LanguageCode=language or DEFAULT_LANGUAGE,
                MediaFormat="wav",
                Media={"MediaFileUri": f"s3://{self.bucket}/{key}"},
                OutputBucketName=self.bucket,
                Settings={
                    "ShowSpeakerLabels": True,
                    "MaxSpeakerLabels": self._settings.transcribe_max_speakers,
                },
            )
        except (BotoCoreError, ClientError) as e:
            logger.exception("Failed to start transcription job")
            raise SubmissionError() from e

        job_id = response.get("TranscriptionJob", {}).get("TranscriptionJobName") or job_name
        logger.info(
            "Transcription job started",
            extra={"job_id": job_id, "language": language, "audio_bytes": len(audio)},
        )
        return job_id

    def get_status(self, job_id: str) -> JobStatusResult:
        """
        Query a job once.

        A completed job whose transcript cannot be located or read is reported
        as failed rather than raised. Raises PollingFailure only when the query
        itself fails.
        """
        try:
            response = self._transcribe.get_transcription_job(TranscriptionJobName=job_id)
        except (BotoCoreError, ClientError) as e:
            logger.exception("Status check failed", extra={"job_id": job_id})
            raise PollingFailure() from e

        job = response.get("TranscriptionJob") or {}
        status = map_aws_status(job.get("TranscriptionJobStatus"))

        if status is JobStatus.FAILED:
            reason = job.get("FailureReason") or "Transcription failed"
            logger.warning("Transcription job failed", extra={"job_id": job_id, "reason": reason})
            return JobStatusResult(status=JobStatus.FAILED, error=reason)

        if status is JobStatus.PROCESSING:
            return JobStatusResult(status=JobStatus.PROCESSING)

        uri = (job.get("Transcript") or {}).get("TranscriptFileUri")
        if not uri:
            logger.error("No transcript URI found for completed job", extra={"job_id": job_id})
            return JobStatusResult(status=JobStatus.FAILED, error="No transcript URI found")
        try:
            bucket, key = parse_transcript_uri(uri)
        except ValueError:
            logger.error("Invalid transcript URI", extra={"job_id": job_id, "uri": uri})
            return JobStatusResult(status=JobStatus.FAILED, error="Invalid S3 URI format")

        return self._read_transcript(job_id, bucket, key)

    def _read_transcript(self, job_id: str, bucket: str, key: str) -> JobStatusResult:
        try:
            obj = self._s3.get_object(Bucket=bucket, Key=key)
            raw = obj["Body"].read()
        except (BotoCoreError, ClientError) as e:
            logger.exception("Failed to fetch transcript", extra={"job_id": job_id})
            raise PollingFailure("Failed to fetch transcript") from e

        if not raw:
            return JobStatusResult(status=JobStatus.FAILED, error="No transcript content found")

        try:
            results = json.loads(raw)["results"]
            transcript = results["transcripts"][0]["transcript"]
        except (ValueError, KeyError, IndexError, TypeError):
            return JobStatusResult(status=JobStatus.FAILED, error="Malformed transcript content")

        language_codes = results.get("language_codes") or []
        # Multi-language jobs return dicts; single-language jobs only set language_code.
        codes = [c.get("language_code") if isinstance(c, dict) else c for c in language_codes]
        codes = [c for c in codes if c]
        if not codes and results.get("language_code"):
            codes = [results["language_code"]]

        logger.info(
            "Transcription completed",
            extra={"job_id": job_id, "transcript_length": len(transcript), "languages": codes},
        )
        return JobStatusResult(
            status=JobStatus.COMPLETED,
            transcript=transcript,
            language_codes=codes,
        )
