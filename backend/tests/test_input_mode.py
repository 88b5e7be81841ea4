"""
Input mode controller: consent gating of voice mode.
"""

import pytest

from mojimajic.core.notifications import Level, Notifier
from mojimajic.core.consent import ConsentManager
from mojimajic.core.exceptions import RecordingInProgressError
from mojimajic.core.input_mode import (
    CONSENT_REQUIRED_MESSAGE,
    VOICE_DISABLED_MESSAGE,
    InputMode,
    InputModeController,
)


@pytest.fixture
def notifier():
    return Notifier()


def _controller(store, notifier, prompt=None, recording=False):
    consent = ConsentManager(store, prompt=prompt)
    return consent, InputModeController(consent, notifier, is_recording=lambda: recording)


def test_starts_in_text_mode(store, notifier):
    _, controller = _controller(store, notifier)
    assert controller.mode is InputMode.TEXT


def test_accepted_consent_enters_voice(store, notifier):
    store.set("mojimajic-consent", "accepted")
    _, controller = _controller(store, notifier)
    assert controller.request_voice() is InputMode.VOICE
    assert notifier.recent == []


def test_pending_consent_prompts_then_enters_voice(store, notifier):
    modes_during_prompt = []
    controller = None

    def prompt():
        modes_during_prompt.append(controller.mode)
        return True

    _, controller = _controller(store, notifier, prompt=prompt)
    assert controller.request_voice() is InputMode.VOICE
    assert modes_during_prompt == [InputMode.TEXT]


def test_pending_consent_declined_stays_text_and_notifies(store, notifier):
    _, controller = _controller(store, notifier, prompt=lambda: False)
    assert controller.request_voice() is InputMode.TEXT
    assert notifier.last.level is Level.INFO
    assert notifier.last.message == VOICE_DISABLED_MESSAGE


def test_dismissed_prompt_stays_text(store, notifier):
    _, controller = _controller(store, notifier, prompt=lambda: None)
    assert controller.request_voice() is InputMode.TEXT
    assert notifier.last.message == CONSENT_REQUIRED_MESSAGE


def test_declined_consent_never_prompts(store, notifier):
    store.set("mojimajic-consent", "declined")
    calls = []
    _, controller = _controller(store, notifier, prompt=lambda: calls.append(1) or True)
    assert controller.request_voice() is InputMode.TEXT
    assert calls == []


def test_switch_to_text_unconditional_when_idle(store, notifier):
    store.set("mojimajic-consent", "accepted")
    _, controller = _controller(store, notifier)
    controller.request_voice()
    assert controller.switch_to_text() is InputMode.TEXT


def test_switch_to_text_refused_while_recording(store, notifier):
    store.set("mojimajic-consent", "accepted")
    _, controller = _controller(store, notifier, recording=True)
    controller.request_voice()
    with pytest.raises(RecordingInProgressError):
        controller.switch_to_text()
    assert controller.mode is InputMode.VOICE


def test_decline_while_in_voice_reverts_to_text(store, notifier):
    store.set("mojimajic-consent", "accepted")
    consent, controller = _controller(store, notifier)
    controller.request_voice()

    consent.decline()

    assert controller.mode is InputMode.TEXT
    assert notifier.last.message == VOICE_DISABLED_MESSAGE


def test_reset_leaves_voice_mode(store, notifier):
    store.set("mojimajic-consent", "accepted")
    consent, controller = _controller(store, notifier)
    controller.request_voice()

    consent.reset()

    assert controller.mode is InputMode.TEXT


def test_voice_request_completes_when_consent_accepted_later(store, notifier):
    consent, controller = _controller(store, notifier, prompt=None)

    assert controller.request_voice() is InputMode.TEXT
    assert controller.voice_requested is True

    consent.accept()

    assert controller.mode is InputMode.VOICE
    assert controller.voice_requested is False


def test_voice_request_dropped_when_consent_declined_later(store, notifier):
    consent, controller = _controller(store, notifier, prompt=lambda: None)
    controller.request_voice()

    consent.decline()
    consent.accept()

    assert controller.mode is InputMode.TEXT
    assert controller.voice_requested is False


def test_accept_without_request_stays_text(store, notifier):
    consent, controller = _controller(store, notifier)
    consent.accept()
    assert controller.mode is InputMode.TEXT


def test_switch_to_text_withdraws_waiting_request(store, notifier):
    consent, controller = _controller(store, notifier)
    controller.request_voice()
    controller.switch_to_text()

    consent.accept()

    assert controller.mode is InputMode.TEXT
