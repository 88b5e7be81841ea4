"""
Microphone capture with sounddevice.

Chunks arrive on PortAudio's callback thread and are buffered in memory;
stop() joins them into a single 16-bit PCM WAV payload and releases the device.
"""

from __future__ import annotations

import io
import logging
import threading
import wave
from typing import Any, Callable

import numpy as np

from ..core.exceptions import DeviceUnavailable, PermissionDenied, RecordingInProgressError

logger = logging.getLogger(__name__)

SAMPLE_RATE = 16000
CHANNELS = 1

# Substrings PortAudio/CoreAudio use when the OS refuses the microphone.
_PERMISSION_HINTS = ("permission", "not authorized", "not permitted", "access denied")


def _default_stream_factory(**kwargs: Any):
    # Imported lazily: loading sounddevice needs the PortAudio shared library.
    import sounddevice as sd

    return sd.InputStream(**kwargs)


def _device_errors() -> tuple[type[Exception], ...]:
    """Errors the device layer raises when a stream cannot be opened."""
    try:
        import sounddevice as sd
    except OSError:
        # PortAudio library missing: the default factory fails with OSError as well.
        return (OSError,)
    return (OSError, sd.PortAudioError)


def encode_wav(chunks: list[np.ndarray], sample_rate: int = SAMPLE_RATE, channels: int = CHANNELS) -> bytes:
    """Join float32 chunks in [-1, 1] and encode them as 16-bit PCM WAV."""
    if chunks:
        samples = np.concatenate(chunks, axis=0).reshape(-1)
    else:
        samples = np.zeros(0, dtype=np.float32)
    pcm = (np.clip(samples, -1.0, 1.0) * 32767).astype("<i2")

    buf = io.BytesIO()
    with wave.open(buf, "wb") as w:
        w.setnchannels(channels)
        w.setsampwidth(2)
        w.setframerate(sample_rate)
        w.writeframes(pcm.tobytes())
    return buf.getvalue()


class AudioCapture:
    """
    One microphone recording at a time.

    start() acquires the device (PermissionDenied / DeviceUnavailable on
    failure); stop() finalizes and returns the WAV bytes, or None when
    nothing was recording.
    """

    def __init__(
        self,
        sample_rate: int = SAMPLE_RATE,
        channels: int = CHANNELS,
        device: int | str | None = None,
        stream_factory: Callable[..., Any] = _default_stream_factory,
    ) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self.device = device
        self._stream_factory = stream_factory
        self._stream = None
        self._chunks: list[np.ndarray] = []
        self._lock = threading.Lock()

    @property
    def is_recording(self) -> bool:
        return self._stream is not None

    @property
    def duration(self) -> float:
        """Seconds of audio buffered so far."""
        with self._lock:
            frames = sum(len(c) for c in self._chunks)
        return frames / self.sample_rate

    def _on_audio(self, indata, frames, time_info, status) -> None:
        if status:
            logger.debug("Audio callback status", extra={"status": str(status)})
        with self._lock:
            self._chunks.append(indata.copy())

    def start(self) -> None:
        if self._stream is not None:
            raise RecordingInProgressError()

        self._chunks = []
        stream = None
        device_errors = _device_errors()
        try:
            stream = self._stream_factory(
                samplerate=self.sample_rate,
                channels=self.channels,
                dtype="float32",
                device=self.device,
                callback=self._on_audio,
            )
            stream.start()
        except device_errors as e:
            if stream is not None:
                stream.close()
            message = str(e)
            logger.warning("Could not open microphone", extra={"error": message})
            if any(hint in message.lower() for hint in _PERMISSION_HINTS):
                raise PermissionDenied() from e
            raise DeviceUnavailable() from e

        self._stream = stream
        logger.info("Recording started", extra={"sample_rate": self.sample_rate})

    def stop(self) -> bytes | None:
        """Finalize the recording. No-op (None) when not recording."""
        stream = self._stream
        if stream is None:
            return None
        self._stream = None
        try:
            stream.stop()
        finally:
            stream.close()

        with self._lock:
            chunks, self._chunks = self._chunks, []
        if not chunks:
            logger.info("Recording stopped with no audio")
            return b""

        payload = encode_wav(chunks, self.sample_rate, self.channels)
        logger.info(
            "Recording finalized",
            extra={"seconds": sum(len(c) for c in chunks) / self.sample_rate, "wav_bytes": len(payload)},
        )
        return payload
