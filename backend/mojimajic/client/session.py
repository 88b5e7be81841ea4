"""
Speech-to-emoji session: the pipeline behind the chat screen.

Voice path: stop recording -> submit job -> poll until terminal -> convert
transcript -> append. Text path: convert -> append. Every stage has its own
error channel and every failure ends as a notification and/or a system
entry in the log; nothing escapes to the caller.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Callable

from ..core.config import get_settings
from ..core.consent import ConsentManager, ConsentPrompt, ConsentState, ConsentStore
from ..core.constants import DEFAULT_LANGUAGE, EmojiMode, JobStatus, is_text_present
from ..core.conversation import Conversation, Message
from ..core.exceptions import (
    ClipboardError,
    ConversionError,
    DeviceUnavailable,
    PermissionDenied,
    PollingCancelled,
    PollingFailure,
    SubmissionError,
)
from ..core.input_mode import CONSENT_REQUIRED_MESSAGE, InputMode, InputModeController
from .api_client import MojimajicAPI
from .audio import AudioCapture
from .clipboard import copy_to_clipboard
from .emoji import EmojiConversionClient
from ..core.notifications import Notifier
from .transcription import TranscriptionJobClient

logger = logging.getLogger(__name__)

MIC_ERROR_TEXT = "Error accessing microphone"
AUDIO_ERROR_TEXT = "Error processing audio"


class SessionStatus(str, Enum):
    """The visible status label."""

    IDLE = ""
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class SpeechToEmojiSession:
    def __init__(
        self,
        transcription: TranscriptionJobClient,
        emoji: EmojiConversionClient,
        consent: ConsentManager,
        audio: AudioCapture | None = None,
        conversation: Conversation | None = None,
        notifier: Notifier | None = None,
        copy: Callable[[str], None] = copy_to_clipboard,
        language: str = DEFAULT_LANGUAGE,
        emoji_mode: EmojiMode = EmojiMode.EMOJI,
        voice_emoji_mode: EmojiMode = EmojiMode.MIXED,
    ) -> None:
        self.transcription = transcription
        self.emoji = emoji
        self.consent = consent
        self.audio = audio or AudioCapture()
        self.conversation = conversation or Conversation()
        self.notifier = notifier or Notifier()
        self.language = language
        self.emoji_mode = emoji_mode
        # Spoken transcripts keep filler words as text and use the detected languages.
        self.voice_emoji_mode = voice_emoji_mode
        self.text_input = ""
        self.status = SessionStatus.IDLE
        self._copy = copy
        self._cancel = asyncio.Event()
        self._job_in_flight = False
        self._text_in_flight = False
        self._api: MojimajicAPI | None = None

        # Registered before the controller's own listener so a live recording
        # is already down when the controller drops back to text.
        consent.subscribe(self._on_consent_change)
        self.controller = InputModeController(
            consent, self.notifier, is_recording=lambda: self.audio.is_recording
        )

    @classmethod
    def from_settings(
        cls,
        prompt: ConsentPrompt | None = None,
        audio: AudioCapture | None = None,
    ) -> SpeechToEmojiSession:
        """Wire a session against the configured backend and local storage."""
        settings = get_settings()
        api = MojimajicAPI()
        session = cls(
            transcription=TranscriptionJobClient(api),
            emoji=EmojiConversionClient(api),
            consent=ConsentManager(ConsentStore(settings.storage_path), prompt=prompt),
            audio=audio,
            language=settings.transcribe_language,
        )
        session._api = api
        return session

    # --- state ---

    @property
    def mode(self) -> InputMode:
        return self.controller.mode

    @property
    def is_recording(self) -> bool:
        return self.audio.is_recording

    @property
    def is_busy(self) -> bool:
        """True while a recording or a voice job is in flight; new recordings are refused."""
        return self.audio.is_recording or self._job_in_flight

    @property
    def messages(self) -> tuple[Message, ...]:
        return self.conversation.messages

    @property
    def is_closed(self) -> bool:
        return self._cancel.is_set()

    def _discard(self, path: str) -> None:
        # The log is gone once the session ends; late results are dropped.
        logger.info("Session closed, discarding result", extra={"path": path})
        self.status = SessionStatus.IDLE
        return None

    # --- mode & consent ---

    def request_voice_mode(self) -> InputMode:
        return self.controller.request_voice()

    async def switch_to_text(self) -> InputMode:
        """Leave voice mode. A live recording is stopped and processed first."""
        if self.audio.is_recording:
            await self.stop_recording()
        return self.controller.switch_to_text()

    def reset_consent(self) -> ConsentState:
        return self.consent.reset()

    def _on_consent_change(self, state: ConsentState) -> None:
        if state is not ConsentState.ACCEPTED and self.audio.is_recording:
            # Consent withdrawn: the audio must not be sent anywhere.
            self.audio.stop()
            self.notifier.info("Recording discarded")

    # --- voice path ---

    async def start_recording(self) -> bool:
        if self.mode is not InputMode.VOICE:
            self.notifier.error("Switch to voice mode to record")
            return False
        if not self.consent.is_accepted:
            self.notifier.error(CONSENT_REQUIRED_MESSAGE)
            return False
        if self.is_busy:
            self.notifier.info("Please wait for the current recording to finish")
            return False

        try:
            self.audio.start()
        except (PermissionDenied, DeviceUnavailable) as e:
            logger.warning("Microphone unavailable", extra={"code": e.code})
            self.conversation.append(Message.system(MIC_ERROR_TEXT))
            self.notifier.error("Could not access microphone")
            self.controller.force_text()
            return False

        self.notifier.success("Recording started!")
        return True

    async def stop_recording(self) -> Message | None:
        """
        Stop the microphone and run the voice pipeline once.
        Returns the appended entry, or None when nothing was appended.
        """
        if not self.audio.is_recording:
            return None
        payload = self.audio.stop()
        self.notifier.success("Recording stopped!")
        if not payload:
            self.notifier.info("No audio recorded")
            return None
        return await self._process_voice(payload)

    async def _process_voice(self, payload: bytes) -> Message | None:
        self._job_in_flight = True
        self.status = SessionStatus.PROCESSING
        try:
            try:
                job = await self.transcription.submit(payload, language=self.language)
            except SubmissionError as e:
                logger.warning("Voice submission failed", extra={"error": e.detail})
                self.notifier.error("Failed to process audio")
                self.status = SessionStatus.FAILED
                return None
            if self.is_closed:
                return self._discard("voice")

            try:
                job = await self.transcription.wait_for_completion(job.job_id, cancel=self._cancel)
            except PollingCancelled:
                self.status = SessionStatus.IDLE
                return None
            except PollingFailure as e:
                return self._voice_failure(f"Transcription status unavailable: {e.detail}")

            if job.status is JobStatus.FAILED:
                return self._voice_failure(f"Transcription failed: {job.error or 'unknown error'}")

            transcript = (job.transcript or "").strip()
            if not transcript:
                self.notifier.info("No speech detected")
                self.status = SessionStatus.COMPLETED
                return None

            try:
                emojis = await self.emoji.convert(
                    transcript, mode=self.voice_emoji_mode, languages=job.language_codes
                )
            except ConversionError:
                return self._voice_failure(AUDIO_ERROR_TEXT)
            if self.is_closed:
                return self._discard("voice")

            message = Message.user(transcript, emojis)
            self.conversation.append(message)
            self.notifier.success("Speech converted to emojis!")
            self.status = SessionStatus.COMPLETED
            return message
        finally:
            self._job_in_flight = False

    def _voice_failure(self, text: str) -> Message | None:
        if self.is_closed:
            return self._discard("voice")
        message = Message.system(text)
        self.conversation.append(message)
        self.notifier.error("Failed to process audio")
        self.status = SessionStatus.FAILED
        return message

    # --- text path ---

    async def submit_text(self, text: str | None = None) -> Message | None:
        """
        Convert typed text. On failure only a notification is shown and the
        input box keeps its content for a retry.
        """
        raw = self.text_input if text is None else text
        if not is_text_present(raw):
            self.notifier.error("Please enter some text")
            return None
        if self._text_in_flight:
            return None

        cleaned = raw.strip()
        self._text_in_flight = True
        self.status = SessionStatus.PROCESSING
        try:
            emojis = await self.emoji.convert(cleaned, mode=self.emoji_mode)
        except ConversionError:
            if self.is_closed:
                return self._discard("text")
            self.notifier.error("Failed to convert text to emojis")
            self.status = SessionStatus.FAILED
            return None
        finally:
            self._text_in_flight = False
        if self.is_closed:
            return self._discard("text")

        message = Message.user(cleaned, emojis)
        self.conversation.append(message)
        self.text_input = ""
        self.notifier.success("Text converted to emojis!")
        self.status = SessionStatus.COMPLETED
        return message

    # --- log actions ---

    def toggle_reveal(self, index: int) -> bool:
        return self.conversation.toggle_reveal(index)

    def remove_message(self, index: int) -> Message | None:
        removed = self.conversation.remove(index)
        if removed is not None:
            self.notifier.success("Message removed")
        return removed

    def copy_emojis(self, index: int) -> bool:
        try:
            copied = self.conversation.copy_emojis(index, copy=self._copy)
        except ClipboardError:
            self.notifier.error("Failed to copy emojis")
            return False
        if copied:
            self.notifier.success("Emojis copied to clipboard!")
        return copied

    # --- teardown ---

    async def close(self) -> None:
        """
        End the session: abandon any poll loop, drop a live recording and the log.
        Submitted jobs keep running on the backend.
        """
        self._cancel.set()
        if self.audio.is_recording:
            self.audio.stop()
        self.conversation.clear()
        if self._api is not None:
            await self._api.aclose()
