"""Per-post countdown jobs on an APScheduler event-loop scheduler."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger(__name__)

Tick = Callable[[], Awaitable[None]]


def _job_id(post_id: int | str) -> str:
    return f"countdown:{post_id}"


class CountdownScheduler:
    """Owns one recurring job per rendered post, keyed by post id.

    Ticks must be coroutine functions so the scheduler runs them on the
    event loop rather than in its thread pool.
    """

    def __init__(
        self,
        interval_seconds: float = 1.0,
        scheduler: AsyncIOScheduler | None = None,
    ) -> None:
        self._interval = interval_seconds
        self._scheduler = scheduler or AsyncIOScheduler(timezone="UTC")
        self._active: set[int | str] = set()

    @property
    def scheduler(self) -> AsyncIOScheduler:
        return self._scheduler

    @property
    def active(self) -> frozenset[int | str]:
        return frozenset(self._active)

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def start(self) -> None:
        if not self._scheduler.running:
            self._scheduler.start()
            logger.debug("Countdown scheduler started")

    def stop(self) -> None:
        self.cancel_all()
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.debug("Countdown scheduler stopped")

    def schedule(self, post_id: int | str, tick: Tick) -> None:
        # A stopped scheduler queues duplicates instead of replacing them
        if post_id in self._active:
            self.cancel(post_id)
        self._scheduler.add_job(
            tick,
            trigger=IntervalTrigger(seconds=self._interval),
            id=_job_id(post_id),
            replace_existing=True,
            coalesce=True,
            max_instances=1,
            misfire_grace_time=None,
        )
        self._active.add(post_id)

    def cancel(self, post_id: int | str) -> None:
        self._active.discard(post_id)
        try:
            self._scheduler.remove_job(_job_id(post_id))
        except JobLookupError:
            pass

    def cancel_all(self) -> None:
        for post_id in list(self._active):
            self.cancel(post_id)
