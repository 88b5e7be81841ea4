"""
Voice/text input mode, gated by microphone consent.

text -> voice needs accepted consent (pending is resolved by prompting first).
A request left pending by the prompt completes when consent is later accepted.
voice -> text is unconditional except while a recording is live: the owner
has to stop and finalize it before switching so audio is never dropped.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable

from .notifications import Notifier
from .consent import ConsentManager, ConsentState
from .exceptions import RecordingInProgressError

logger = logging.getLogger(__name__)

VOICE_DISABLED_MESSAGE = "Voice recording disabled. You can still use text input!"
CONSENT_REQUIRED_MESSAGE = "Please accept privacy terms to use voice recording"


class InputMode(str, Enum):
    VOICE = "voice"
    TEXT = "text"


class InputModeController:
    def __init__(
        self,
        consent: ConsentManager,
        notifier: Notifier,
        is_recording: Callable[[], bool] = lambda: False,
    ) -> None:
        self._consent = consent
        self._notifier = notifier
        self._is_recording = is_recording
        self._mode = InputMode.TEXT
        self._voice_requested = False
        consent.subscribe(self._on_consent_change)

    @property
    def mode(self) -> InputMode:
        return self._mode

    def _set_mode(self, mode: InputMode) -> None:
        if mode is not self._mode:
            logger.info("Input mode changed", extra={"mode": mode.value})
        self._mode = mode

    def request_voice(self) -> InputMode:
        """Try to enter voice mode. Returns the resulting mode."""
        if self._mode is InputMode.VOICE:
            return self._mode

        state = self._consent.state
        if state is ConsentState.PENDING:
            state = self._consent.resolve()

        if state is ConsentState.ACCEPTED:
            self._set_mode(InputMode.VOICE)
        elif state is ConsentState.DECLINED:
            self._notifier.info(VOICE_DISABLED_MESSAGE)
        else:
            self._voice_requested = True
            self._notifier.error(CONSENT_REQUIRED_MESSAGE)
        return self._mode

    @property
    def voice_requested(self) -> bool:
        """True while a voice request waits for consent to be accepted."""
        return self._voice_requested

    def switch_to_text(self) -> InputMode:
        if self._is_recording():
            raise RecordingInProgressError()
        self._voice_requested = False
        self._set_mode(InputMode.TEXT)
        return self._mode

    def force_text(self) -> InputMode:
        """Fallback after a microphone failure; the recorder is already down."""
        self._voice_requested = False
        self._set_mode(InputMode.TEXT)
        return self._mode

    def _on_consent_change(self, state: ConsentState) -> None:
        if state is ConsentState.ACCEPTED:
            if self._voice_requested:
                self._voice_requested = False
                self._set_mode(InputMode.VOICE)
            return
        if state is ConsentState.DECLINED:
            self._voice_requested = False
        # Losing consent (decline, or reset back to pending) while in voice mode drops back to text.
        if self._mode is not InputMode.VOICE:
            return
        self._set_mode(InputMode.TEXT)
        if state is ConsentState.DECLINED:
            self._notifier.info(VOICE_DISABLED_MESSAGE)
