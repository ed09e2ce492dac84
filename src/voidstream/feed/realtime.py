"""Change-feed capability interface and a polling transport behind it."""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from voidstream.feed.errors import ServiceError
from voidstream.feed.rest import RestClient

logger = logging.getLogger(__name__)


class ChangeType(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass
class ChangeEvent:
    type: ChangeType
    topic: str
    record: dict[str, Any] | None = None
    old_record: dict[str, Any] | None = None


@dataclass(frozen=True)
class SubscriptionHandle:
    topic: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])


ChangeHandler = Callable[[ChangeEvent], None]
StatusCallback = Callable[[bool], Awaitable[None]]


class ChangeFeed(Protocol):
    """What the controller needs from a live-update transport."""

    def subscribe(self, topic: str, handler: ChangeHandler) -> SubscriptionHandle: ...

    def unsubscribe(self, handle: SubscriptionHandle) -> None: ...


def diff_snapshots(
    topic: str,
    before: dict[Any, dict[str, Any]],
    after: dict[Any, dict[str, Any]],
) -> list[ChangeEvent]:
    """Compare two id-keyed snapshots of a collection."""
    events: list[ChangeEvent] = []
    for row_id, row in after.items():
        old = before.get(row_id)
        if old is None:
            events.append(ChangeEvent(ChangeType.INSERT, topic, record=row))
        elif old != row:
            events.append(ChangeEvent(ChangeType.UPDATE, topic, record=row, old_record=old))
    for row_id, row in before.items():
        if row_id not in after:
            events.append(ChangeEvent(ChangeType.DELETE, topic, old_record=row))
    return events


class PollingChangeFeed:
    """Derives change notifications by polling the collection.

    The first successful poll of a subscription only records a baseline.
    Reachability transitions are reported to ``on_status``.
    """

    def __init__(
        self,
        rest: RestClient,
        interval_seconds: float = 5.0,
        columns: str = "id,content,created_at",
        on_status: StatusCallback | None = None,
    ) -> None:
        self._rest = rest
        self._interval = interval_seconds
        self._columns = columns
        self._on_status = on_status
        self._tasks: dict[SubscriptionHandle, asyncio.Task] = {}
        self._reachable: bool | None = None

    def set_status_callback(self, callback: StatusCallback | None) -> None:
        self._on_status = callback

    def subscribe(self, topic: str, handler: ChangeHandler) -> SubscriptionHandle:
        handle = SubscriptionHandle(topic=topic)
        # Raises RuntimeError outside a running loop; callers treat that as non-fatal
        loop = asyncio.get_running_loop()
        self._tasks[handle] = loop.create_task(self._poll(handle, handler))
        logger.info("Subscribed to changes on %s (%s)", topic, handle.id)
        return handle

    def unsubscribe(self, handle: SubscriptionHandle) -> None:
        task = self._tasks.pop(handle, None)
        if task is not None:
            task.cancel()
            logger.info("Unsubscribed from %s (%s)", handle.topic, handle.id)

    def close(self) -> None:
        for handle in list(self._tasks):
            self.unsubscribe(handle)

    @property
    def subscriptions(self) -> list[SubscriptionHandle]:
        return list(self._tasks)

    async def _poll(self, handle: SubscriptionHandle, handler: ChangeHandler) -> None:
        baseline: dict[Any, dict[str, Any]] | None = None
        while True:
            try:
                rows = await self._rest.select(handle.topic, columns=self._columns)
            except ServiceError as exc:
                logger.warning("Change poll on %s failed: %s", handle.topic, exc)
                await self._set_reachable(False)
            else:
                await self._set_reachable(True)
                try:
                    snapshot = {row["id"]: row for row in rows}
                except Exception:
                    logger.exception("Malformed change poll result on %s", handle.topic)
                    await asyncio.sleep(self._interval)
                    continue
                if baseline is not None:
                    for event in diff_snapshots(handle.topic, baseline, snapshot):
                        logger.debug("Change on %s: %s", handle.topic, event.type.value)
                        try:
                            handler(event)
                        except Exception:
                            logger.exception("Change handler failed")
                baseline = snapshot
            await asyncio.sleep(self._interval)

    async def _set_reachable(self, reachable: bool) -> None:
        previous = self._reachable
        self._reachable = reachable
        if previous is None or previous == reachable or self._on_status is None:
            return
        try:
            await self._on_status(reachable)
        except Exception:
            logger.exception("Status callback failed")
