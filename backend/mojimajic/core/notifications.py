"""
Transient notifications (the browser showed these as toasts).
They never enter the conversation log.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)

MAX_NOTIFICATIONS = 20


class Level(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    level: Level
    message: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class Notifier:
    """Keeps the most recent notifications and fans them out to listeners."""

    def __init__(self, maxlen: int = MAX_NOTIFICATIONS) -> None:
        self._recent: deque[Notification] = deque(maxlen=maxlen)
        self._listeners: list[Callable[[Notification], None]] = []

    def subscribe(self, listener: Callable[[Notification], None]) -> None:
        self._listeners.append(listener)

    @property
    def recent(self) -> list[Notification]:
        return list(self._recent)

    @property
    def last(self) -> Notification | None:
        return self._recent[-1] if self._recent else None

    def notify(self, level: Level, message: str) -> Notification:
        notification = Notification(level=level, message=message)
        self._recent.append(notification)
        logger.debug("Notification", extra={"level": level.value, "notification": message})
        for listener in self._listeners:
            listener(notification)
        return notification

    def success(self, message: str) -> Notification:
        return self.notify(Level.SUCCESS, message)

    def info(self, message: str) -> Notification:
        return self.notify(Level.INFO, message)

    def error(self, message: str) -> Notification:
        return self.notify(Level.ERROR, message)

    def clear(self) -> None:
        self._recent.clear()
