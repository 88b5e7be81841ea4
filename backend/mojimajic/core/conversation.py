"""
In-memory conversation log for one session.
Single user; lives until the session ends. Entries are addressed by position.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterator

from .exceptions import ClipboardError

logger = logging.getLogger(__name__)


@dataclass
class Message:
    """One log entry: a converted user submission or a system/error notice."""

    text: str
    emojis: str | None = None
    is_user: bool = True
    # Text starts hidden; the emoji rendering is always shown.
    is_revealed: bool = False

    def __post_init__(self) -> None:
        if not self.text or not self.text.strip():
            raise ValueError("Message text must not be empty")
        if not self.is_user and self.emojis is not None:
            raise ValueError("System messages carry no emojis")

    @classmethod
    def user(cls, text: str, emojis: str | None) -> Message:
        return cls(text=text.strip(), emojis=emojis, is_user=True)

    @classmethod
    def system(cls, text: str) -> Message:
        return cls(text=text, emojis=None, is_user=False)


class Conversation:
    """
    Ordered log of messages.

    Insertion order is the only ordering. Scroll listeners fire only when the
    log grows, never on reveal toggles or removals.
    """

    def __init__(self) -> None:
        self._messages: list[Message] = []
        self._scroll_listeners: list[Callable[[int], None]] = []

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(list(self._messages))

    def __getitem__(self, index: int) -> Message:
        return self._messages[index]

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    def on_scroll(self, listener: Callable[[int], None]) -> None:
        """Register a callback receiving the index of each newly appended entry."""
        self._scroll_listeners.append(listener)

    def _in_range(self, index: int) -> bool:
        return 0 <= index < len(self._messages)

    def append(self, message: Message) -> int:
        """Add message at the end and return its position."""
        self._messages.append(message)
        position = len(self._messages) - 1
        for listener in self._scroll_listeners:
            listener(position)
        return position

    def toggle_reveal(self, index: int) -> bool:
        """Flip is_revealed at index. Returns False (no-op) when out of range."""
        if not self._in_range(index):
            return False
        message = self._messages[index]
        message.is_revealed = not message.is_revealed
        return True

    def remove(self, index: int) -> Message | None:
        """Delete the entry at index; later entries shift down by one."""
        if not self._in_range(index):
            return None
        return self._messages.pop(index)

    def copy_emojis(self, index: int, copy: Callable[[str], None]) -> bool:
        """
        Copy the entry's emojis with ``copy``, usually the system clipboard.

        Returns False for out-of-range entries or entries without emojis.
        ClipboardError from the platform propagates to the caller.
        """
        if not self._in_range(index):
            return False
        emojis = self._messages[index].emojis
        if not emojis:
            return False
        try:
            copy(emojis)
        except ClipboardError:
            logger.warning("Clipboard copy failed", extra={"index": index})
            raise
        return True

    def clear(self) -> None:
        """Drop every entry (session end)."""
        self._messages.clear()
