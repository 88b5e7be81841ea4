"""
Pytest configuration and shared fixtures for Mojimajic tests.
Providers (S3/Transcribe, OpenAI, microphone, clipboard) are faked so tests run offline.
"""

from __future__ import annotations

import asyncio
import json

import httpx
import numpy as np
import pytest
from fastapi.testclient import TestClient

from mojimajic.client.api_client import MojimajicAPI
from mojimajic.client.audio import AudioCapture
from mojimajic.client.emoji import EmojiConversionClient
from mojimajic.client.session import SpeechToEmojiSession
from mojimajic.client.transcription import TranscriptionJobClient
from mojimajic.core.consent import ConsentManager, ConsentStore
from mojimajic.core.constants import JobStatus
from mojimajic.core.exceptions import ConversionError
from mojimajic.core.notifications import Notifier
from mojimajic.services.transcribe import JobStatusResult

FAKE_EMOJIS = "😊☀️"


class FakeTranscribeService:
    """Stands in for TranscribeJobService; statuses are served in order, the last one repeats."""

    def __init__(self, statuses: list[JobStatusResult] | None = None):
        self.submitted: list[tuple[bytes, str]] = []
        self.queried: list[str] = []
        self.statuses = statuses or [JobStatusResult(status=JobStatus.PROCESSING)]

    def start_job(self, audio: bytes, language: str) -> str:
        self.submitted.append((audio, language))
        return f"transcription-{len(self.submitted)}"

    def get_status(self, job_id: str) -> JobStatusResult:
        self.queried.append(job_id)
        if len(self.statuses) > 1:
            return self.statuses.pop(0)
        return self.statuses[0]


class FakeConverter:
    """Stands in for EmojiConverter."""

    def __init__(self, result: str = FAKE_EMOJIS, fail: bool = False):
        self.result = result
        self.fail = fail
        self.calls: list[dict] = []

    async def convert(self, text, mode="emoji", languages=None):
        self.calls.append({"text": text, "mode": mode, "languages": list(languages or [])})
        if self.fail:
            raise ConversionError()
        return self.result


@pytest.fixture
def transcribe_service():
    return FakeTranscribeService()


@pytest.fixture
def converter():
    return FakeConverter()


@pytest.fixture
def client(transcribe_service, converter):
    """FastAPI test client with fake providers."""
    from mojimajic.dependencies import get_emoji_converter, get_transcribe_service
    from mojimajic.main import app

    app.dependency_overrides[get_transcribe_service] = lambda: transcribe_service
    app.dependency_overrides[get_emoji_converter] = lambda: converter
    yield TestClient(app)
    app.dependency_overrides.clear()


class FakeStream:
    """sounddevice.InputStream double: start() feeds the callback a fixed number of chunks."""

    def __init__(self, callback, samplerate, channels, chunks=3, chunk_seconds=1.0, **_):
        self.callback = callback
        self.samplerate = samplerate
        self.channels = channels
        self.chunks = chunks
        self.chunk_frames = int(samplerate * chunk_seconds)
        self.started = False
        self.stopped = False
        self.closed = False

    def start(self):
        self.started = True
        for _ in range(self.chunks):
            data = np.full((self.chunk_frames, self.channels), 0.25, dtype=np.float32)
            self.callback(data, self.chunk_frames, None, None)

    def stop(self):
        self.stopped = True

    def close(self):
        self.closed = True


class StreamFactory:
    """Records every stream it builds; ``error`` makes construction fail."""

    def __init__(self, error: Exception | None = None, chunks: int = 3):
        self.error = error
        self.chunks = chunks
        self.streams: list[FakeStream] = []

    def __call__(self, **kwargs):
        if self.error is not None:
            raise self.error
        stream = FakeStream(chunks=self.chunks, **kwargs)
        self.streams.append(stream)
        return stream


@pytest.fixture
def stream_factory():
    return StreamFactory()


@pytest.fixture
def failing_stream_factory():
    """Factory for stream factories whose construction raises ``error``."""
    return lambda error: StreamFactory(error=error)


@pytest.fixture
def audio(stream_factory):
    return AudioCapture(stream_factory=stream_factory)


@pytest.fixture
def store(tmp_path):
    return ConsentStore(tmp_path / "storage.json")


def _fresh(response: httpx.Response) -> httpx.Response:
    # A Response is bound to one request, so scripted ones are copied per call.
    return httpx.Response(response.status_code, headers=response.headers, content=response.content)


class Backend:
    """Scripted backend for httpx.MockTransport. Records every request."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.submit_response = httpx.Response(200, json={"jobId": "job-1", "status": "processing"})
        self.statuses: list[httpx.Response] = [
            httpx.Response(200, json={"status": "completed", "transcript": "hello world", "languageCodes": ["en-US"]})
        ]
        self.emoji_response = httpx.Response(200, json={"emojis": FAKE_EMOJIS})
        # When set, /emojis answers only after the event fires.
        self.emoji_gate: asyncio.Event | None = None

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/emojis" and self.emoji_gate is not None:
            await self.emoji_gate.wait()
        if request.url.path == "/transcribe":
            return _fresh(self.submit_response)
        if request.url.path == "/transcribe/status":
            if len(self.statuses) > 1:
                return _fresh(self.statuses.pop(0))
            return _fresh(self.statuses[0])
        if request.url.path == "/emojis":
            return _fresh(self.emoji_response)
        return httpx.Response(404, json={"detail": "Not Found"})

    def paths(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def json_bodies(self, path: str) -> list[dict]:
        return [json.loads(r.content) for r in self.paths(path)]


@pytest.fixture
def backend():
    return Backend()


@pytest.fixture
def api(backend):
    return MojimajicAPI(base_url="http://test", transport=httpx.MockTransport(backend))


@pytest.fixture
def make_session(api, audio, store):
    """Build a session against the scripted backend; consent defaults to accepted."""

    def _make(consent_state: str | None = "accepted", prompt=None, copy=None, max_attempts=5):
        if consent_state is not None:
            store.set("mojimajic-consent", consent_state)
        kwargs = {}
        if copy is not None:
            kwargs["copy"] = copy
        return SpeechToEmojiSession(
            transcription=TranscriptionJobClient(api, poll_interval=0.01, max_attempts=max_attempts),
            emoji=EmojiConversionClient(api),
            consent=ConsentManager(store, prompt=prompt),
            audio=audio,
            notifier=Notifier(),
            **kwargs,
        )

    return _make
