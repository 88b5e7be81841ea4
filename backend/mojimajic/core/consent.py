"""
Microphone consent: pending -> accepted | declined, reset() back to pending.

The persisted flag is the only source of truth at startup. A stored
"accepted"/"declined" means no prompt until reset().
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from .constants import CONSENT_STORAGE_KEY

logger = logging.getLogger(__name__)

# True = accept, False = decline, None = dismissed without choosing.
ConsentPrompt = Callable[[], Optional[bool]]


class ConsentState(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class ConsentStore:
    """
    Small JSON key/value file standing in for the browser's localStorage.
    Values are strings; the whole file is rewritten on every change.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError):
            logger.warning("Unreadable client storage, starting empty", extra={"path": str(self.path)})
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def get(self, key: str) -> str | None:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._save(data)


class ConsentManager:
    """Tri-state consent flag backed by a ConsentStore."""

    def __init__(self, store: ConsentStore, prompt: ConsentPrompt | None = None) -> None:
        self._store = store
        self._prompt = prompt
        self._listeners: list[Callable[[ConsentState], None]] = []
        self.prompt_count = 0
        self._state = self._read_persisted()

    def _read_persisted(self) -> ConsentState:
        raw = self._store.get(CONSENT_STORAGE_KEY)
        if raw == ConsentState.ACCEPTED.value:
            return ConsentState.ACCEPTED
        if raw == ConsentState.DECLINED.value:
            return ConsentState.DECLINED
        return ConsentState.PENDING

    @property
    def state(self) -> ConsentState:
        return self._state

    @property
    def is_accepted(self) -> bool:
        return self._state is ConsentState.ACCEPTED

    def subscribe(self, listener: Callable[[ConsentState], None]) -> None:
        """Register a callback for every state change."""
        self._listeners.append(listener)

    def _set_state(self, state: ConsentState) -> None:
        if state is self._state:
            return
        self._state = state
        logger.info("Consent changed", extra={"consent": state.value})
        for listener in self._listeners:
            listener(state)

    def accept(self) -> None:
        self._store.set(CONSENT_STORAGE_KEY, ConsentState.ACCEPTED.value)
        self._set_state(ConsentState.ACCEPTED)

    def decline(self) -> None:
        self._store.set(CONSENT_STORAGE_KEY, ConsentState.DECLINED.value)
        self._set_state(ConsentState.DECLINED)

    def resolve(self) -> ConsentState:
        """
        Ask the user if consent is still pending; otherwise return the stored answer.
        A dismissed prompt (or no prompt configured) leaves the state pending.
        """
        if self._state is not ConsentState.PENDING or self._prompt is None:
            return self._state

        self.prompt_count += 1
        answer = self._prompt()
        if answer is True:
            self.accept()
        elif answer is False:
            self.decline()
        return self._state

    def reset(self) -> ConsentState:
        """Forget the stored answer, go back to pending and ask again."""
        self._store.remove(CONSENT_STORAGE_KEY)
        self._set_state(ConsentState.PENDING)
        return self.resolve()
