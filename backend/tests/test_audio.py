"""
AudioCapture with a fake sounddevice stream.
"""

import io
import wave

import numpy as np
import pytest

from mojimajic.client import audio as audio_module
from mojimajic.client.audio import AudioCapture, encode_wav
from mojimajic.core.exceptions import DeviceUnavailable, PermissionDenied, RecordingInProgressError


def _read_wav(payload: bytes):
    with wave.open(io.BytesIO(payload), "rb") as w:
        return w.getnchannels(), w.getsampwidth(), w.getframerate(), w.getnframes()


def test_start_opens_mono_16k_stream(audio, stream_factory):
    audio.start()
    assert audio.is_recording
    stream = stream_factory.streams[0]
    assert stream.started
    assert stream.samplerate == 16000
    assert stream.channels == 1


def test_stop_finalizes_full_buffer_and_releases_device(audio, stream_factory):
    """Three one-second chunks come back as one 3 s WAV payload."""
    audio.start()
    assert audio.duration == pytest.approx(3.0)

    payload = audio.stop()

    stream = stream_factory.streams[0]
    assert stream.stopped and stream.closed
    assert not audio.is_recording
    assert _read_wav(payload) == (1, 2, 16000, 48000)


def test_stop_without_recording_is_noop(audio):
    assert audio.stop() is None


def test_stop_with_no_chunks_returns_empty(stream_factory):
    stream_factory.chunks = 0
    audio = AudioCapture(stream_factory=stream_factory)
    audio.start()
    assert audio.stop() == b""


def test_second_start_refused(audio, stream_factory):
    audio.start()
    with pytest.raises(RecordingInProgressError):
        audio.start()
    assert len(stream_factory.streams) == 1


def test_new_recording_starts_with_empty_buffer(audio):
    audio.start()
    audio.stop()
    audio.start()
    assert audio.duration == pytest.approx(3.0)


def test_permission_error_maps_to_permission_denied(failing_stream_factory):
    audio = AudioCapture(stream_factory=failing_stream_factory(OSError("Microphone permission denied by OS")))
    with pytest.raises(PermissionDenied):
        audio.start()
    assert not audio.is_recording


def test_missing_device_maps_to_device_unavailable(failing_stream_factory):
    audio = AudioCapture(stream_factory=failing_stream_factory(OSError("Error querying device -1")))
    with pytest.raises(DeviceUnavailable):
        audio.start()
    assert not audio.is_recording


def test_encode_wav_clips_to_int16():
    payload = encode_wav([np.array([[2.0], [-2.0], [0.0]], dtype=np.float32)])
    with wave.open(io.BytesIO(payload), "rb") as w:
        frames = np.frombuffer(w.readframes(3), dtype="<i2")
    assert frames.tolist() == [32767, -32767, 0]


class PortAudioError(Exception):
    pass


def test_portaudio_error_maps_to_device_unavailable(failing_stream_factory, monkeypatch):
    monkeypatch.setattr(audio_module, "_device_errors", lambda: (OSError, PortAudioError))
    audio = AudioCapture(stream_factory=failing_stream_factory(PortAudioError("Invalid number of channels")))
    with pytest.raises(DeviceUnavailable):
        audio.start()


def test_programming_errors_are_not_masked(failing_stream_factory):
    audio = AudioCapture(stream_factory=failing_stream_factory(TypeError("unexpected keyword argument")))
    with pytest.raises(TypeError):
        audio.start()
    assert not audio.is_recording
