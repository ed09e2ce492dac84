"""Notification dispatcher with pluggable sinks."""

from __future__ import annotations

import logging
import time
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)


class NoticeLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class Notice:
    message: str
    level: NoticeLevel = NoticeLevel.INFO
    created_at: float = field(default_factory=time.monotonic)


NotificationSink = Callable[[Notice], Awaitable[None]]


class NotificationDispatcher:
    """Dispatches user-facing notices to registered sinks.

    Sinks are async callables that receive a ``Notice``.
    The board registers a tray sink, one-shot commands register a console sink.
    """

    def __init__(self) -> None:
        self._sinks: list[NotificationSink] = []

    def register(self, sink: NotificationSink) -> None:
        self._sinks.append(sink)

    def unregister(self, sink: NotificationSink) -> None:
        self._sinks = [s for s in self._sinks if s is not sink]

    async def send(self, message: str, level: NoticeLevel = NoticeLevel.INFO) -> None:
        """Send a notice to all registered sinks. Failures are isolated per-sink."""
        notice = Notice(message, level)
        for sink in self._sinks:
            try:
                await sink(notice)
            except Exception:
                logger.exception("Notification sink failed")

    async def info(self, message: str) -> None:
        await self.send(message, NoticeLevel.INFO)

    async def success(self, message: str) -> None:
        await self.send(message, NoticeLevel.SUCCESS)

    async def error(self, message: str) -> None:
        await self.send(message, NoticeLevel.ERROR)


class NoticeTray:
    """Short-lived notices kept for display, newest first."""

    def __init__(self, lifetime_seconds: float = 5.0, maxlen: int = 5) -> None:
        self._lifetime = lifetime_seconds
        self._notices: deque[Notice] = deque(maxlen=maxlen)

    async def __call__(self, notice: Notice) -> None:
        self._notices.appendleft(notice)

    def active(self, now: float | None = None) -> list[Notice]:
        """Return notices still inside their lifetime, dropping expired ones."""
        now = time.monotonic() if now is None else now
        live = [n for n in self._notices if now - n.created_at < self._lifetime]
        if len(live) != len(self._notices):
            self._notices = deque(live, maxlen=self._notices.maxlen)
        return live
