"""Feed controller: ties the gate, repository, renderer and change feed together."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from datetime import timedelta
from enum import Enum
from typing import Any

import httpx
from apscheduler.jobstores.base import JobLookupError
from apscheduler.triggers.interval import IntervalTrigger

from voidstream.core.config import Settings
from voidstream.core.notifications import NotificationDispatcher
from voidstream.feed.countdown import CountdownScheduler
from voidstream.feed.errors import FetchError, InsertError, ValidationError
from voidstream.feed.gateway import ConnectionGate
from voidstream.feed.models import MAX_POST_LENGTH, validate_content
from voidstream.feed.realtime import ChangeEvent, ChangeFeed, PollingChangeFeed, SubscriptionHandle
from voidstream.feed.renderer import Clock, FeedRenderer, utc_now
from voidstream.feed.repository import PostRepository
from voidstream.feed.rest import RestClient
from voidstream.feed.retry import RetryPolicy
from voidstream.feed.state import FeedState, SubmissionState

logger = logging.getLogger(__name__)

_FALLBACK_JOB_ID = "feed:fallback-refresh"


class SubmissionResult(str, Enum):
    SENT = "sent"
    INVALID = "invalid"
    BLOCKED = "blocked"
    BUSY = "busy"
    FAILED = "failed"


class FeedController:
    """Owns the feed session: connection state, fetches, submissions, live updates."""

    def __init__(
        self,
        repository: PostRepository,
        renderer: FeedRenderer,
        countdowns: CountdownScheduler,
        dispatcher: NotificationDispatcher,
        state: FeedState | None = None,
        changes: ChangeFeed | None = None,
        *,
        max_length: int = MAX_POST_LENGTH,
        debounce_seconds: float = 0.5,
        recovery_seconds: float = 3.0,
        fallback_refresh_seconds: float = 30.0,
        refetch_after_submit: bool = True,
    ) -> None:
        self.state = state or FeedState()
        self._repository = repository
        self._gate = ConnectionGate(repository, self.state)
        self._renderer = renderer
        self._countdowns = countdowns
        self._dispatcher = dispatcher
        self._changes = changes
        self._max_length = max_length
        self._debounce_seconds = debounce_seconds
        self._recovery_seconds = recovery_seconds
        self._fallback_refresh_seconds = fallback_refresh_seconds
        self._refetch_after_submit = refetch_after_submit

        self._subscription: SubscriptionHandle | None = None
        self._debounce_handle: asyncio.TimerHandle | None = None
        self._recovery_handle: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task] = set()
        self._rest: RestClient | None = None
        self._on_state_change: Callable[[], None] | None = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        dispatcher: NotificationDispatcher,
        clock: Clock = utc_now,
        live: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
        refetch_after_submit: bool = True,
    ) -> FeedController:
        """Wire a controller against the configured backend."""
        rest = RestClient(
            settings.rest_url,
            settings.supabase_anon_key,
            timeout=settings.request_timeout_seconds,
            transport=transport,
        )
        repository = PostRepository(
            rest,
            table=settings.posts_table,
            retry=RetryPolicy(settings.retry_attempts, settings.retry_delay_seconds),
            max_length=settings.max_post_length,
        )
        countdowns = CountdownScheduler(settings.countdown_interval_seconds)
        renderer = FeedRenderer(
            countdowns,
            clock=clock,
            ttl=timedelta(hours=settings.post_ttl_hours),
            fade_seconds=settings.expiry_fade_seconds,
        )
        changes = PollingChangeFeed(rest, settings.realtime_poll_seconds) if live else None
        controller = cls(
            repository,
            renderer,
            countdowns,
            dispatcher,
            changes=changes,
            max_length=settings.max_post_length,
            debounce_seconds=settings.realtime_debounce_seconds,
            recovery_seconds=settings.fetch_recovery_seconds,
            fallback_refresh_seconds=settings.fallback_refresh_seconds,
            refetch_after_submit=refetch_after_submit,
        )
        if changes is not None:
            changes.set_status_callback(controller.set_online)
        controller._rest = rest
        return controller

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def renderer(self) -> FeedRenderer:
        return self._renderer

    @property
    def gate(self) -> ConnectionGate:
        return self._gate

    @property
    def repository(self) -> PostRepository:
        return self._repository

    @property
    def max_length(self) -> int:
        return self._max_length

    def set_on_state_change(self, callback: Callable[[], None] | None) -> None:
        self._on_state_change = callback

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> bool:
        """Check the connection, draw the feed, then subscribe for changes."""
        logger.info("VoidStream initializing")
        self._countdowns.start()
        if not await self._gate.check():
            await self._dispatcher.error("Failed to connect to database. Please check configuration.")
            self._schedule_recovery()
            self._state_changed()
            return False

        if await self._fetch_and_render():
            self._subscribe()
        self._state_changed()
        logger.info("VoidStream ready")
        return True

    async def close(self) -> None:
        """Tear down timers, subscriptions and the HTTP client."""
        for handle in (self._debounce_handle, self._recovery_handle):
            if handle is not None:
                handle.cancel()
        self._debounce_handle = None
        self._recovery_handle = None

        if self._subscription is not None and self._changes is not None:
            self._changes.unsubscribe(self._subscription)
            self._subscription = None
        self.state.live = False

        self._stop_fallback_refresh()
        self._renderer.cancel_all()
        self._countdowns.stop()

        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()

        if self._rest is not None:
            await self._rest.aclose()
            self._rest = None

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    async def refresh(self) -> bool:
        """Fetch and redraw the feed. Returns True when the result was drawn."""
        if not self.state.visible:
            logger.debug("Feed hidden; skipping refresh")
            return False
        if self.state.blocked:
            await self._dispatcher.error("Database connection lost. Waiting to reconnect...")
            self._schedule_recovery()
            return False
        return await self._fetch_and_render()

    async def _fetch_and_render(self) -> bool:
        ticket = self.state.next_ticket()
        self.state.in_flight += 1
        self._state_changed()
        try:
            posts = await self._repository.list_posts()
        except FetchError as exc:
            logger.error("Error fetching posts: %s", exc)
            self._gate.mark_error()
            await self._dispatcher.error("Failed to load transmissions. Retrying...")
            self._schedule_recovery()
            return False
        finally:
            self.state.in_flight -= 1
            self._state_changed()

        if not self.state.visible:
            logger.debug("Feed hidden while fetch %d was in flight; dropping result", ticket)
            return False
        if ticket <= self.state.rendered_seq:
            logger.debug("Dropping stale fetch %d (already drew %d)", ticket, self.state.rendered_seq)
            return False
        self.state.rendered_seq = ticket
        self._renderer.render(posts)
        return True

    def _schedule_recovery(self) -> None:
        if self._recovery_handle is not None:
            return
        loop = asyncio.get_running_loop()
        self._recovery_handle = loop.call_later(
            self._recovery_seconds, self._spawn_later, self._recover
        )

    async def _recover(self) -> None:
        self._recovery_handle = None
        if not self.state.blocked:
            return
        if not await self._gate.check():
            self._schedule_recovery()
            return
        await self._dispatcher.success("Connected to VoidStream network")
        await self._fetch_and_render()
        if not self.state.blocked:
            self._subscribe()

    # ------------------------------------------------------------------
    # Live updates
    # ------------------------------------------------------------------

    def _subscribe(self) -> None:
        if self._subscription is not None:
            return
        if self._changes is None:
            self._start_fallback_refresh()
            return
        try:
            self._subscription = self._changes.subscribe(self._repository.table, self.on_change)
        except Exception:
            logger.exception("Failed to set up real-time subscription")
            self._start_fallback_refresh()
            return
        self.state.live = True
        logger.info("Real-time updates enabled")

    def on_change(self, event: ChangeEvent) -> None:
        """Debounce change notifications into a single re-fetch."""
        logger.info("Real-time update received: %s on %s", event.type.value, event.topic)
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
        loop = asyncio.get_running_loop()
        self._debounce_handle = loop.call_later(
            self._debounce_seconds, self._spawn_later, self._debounced_refresh
        )

    async def _debounced_refresh(self) -> None:
        self._debounce_handle = None
        await self.refresh()

    def _start_fallback_refresh(self) -> None:
        scheduler = self._countdowns.scheduler
        if scheduler.get_job(_FALLBACK_JOB_ID) is not None:
            return
        scheduler.add_job(
            self.refresh,
            trigger=IntervalTrigger(seconds=self._fallback_refresh_seconds),
            id=_FALLBACK_JOB_ID,
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        logger.info("Live updates unavailable; refreshing every %ss", self._fallback_refresh_seconds)

    def _stop_fallback_refresh(self) -> None:
        try:
            self._countdowns.scheduler.remove_job(_FALLBACK_JOB_ID)
        except JobLookupError:
            pass

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    async def submit(self, content: str) -> SubmissionResult:
        """Validate and insert a post. The caller clears its input only on SENT."""
        if self.state.submitting:
            logger.debug("Submission already in progress")
            return SubmissionResult.BUSY
        if self.state.blocked:
            await self._dispatcher.error("Cannot transmit: Database connection lost")
            return SubmissionResult.BLOCKED
        try:
            text = validate_content(content, self._max_length)
        except ValidationError as exc:
            await self._dispatcher.error(str(exc))
            return SubmissionResult.INVALID

        self.state.submission = SubmissionState.SUBMITTING
        self._state_changed()
        try:
            await self._repository.create_post(text)
        except InsertError as exc:
            logger.error("Error adding post: %s", exc)
            await self._dispatcher.error("Failed to transmit. Signal lost. Please try again.")
            return SubmissionResult.FAILED
        finally:
            self.state.submission = SubmissionState.IDLE
            self._state_changed()

        await self._dispatcher.success("Transmission sent to the void")
        if self._refetch_after_submit and not self.state.live:
            await self.refresh()
        return SubmissionResult.SENT

    # ------------------------------------------------------------------
    # Surface events
    # ------------------------------------------------------------------

    async def set_visible(self, visible: bool) -> None:
        """Hidden cancels every countdown; visible again means a fresh fetch."""
        if not visible:
            self.state.visible = False
            self._renderer.cancel_all()
            logger.debug("Feed hidden; countdowns cancelled")
            self._state_changed()
            return
        if self.state.visible:
            return
        self.state.visible = True
        self._state_changed()
        await self.refresh()

    async def set_online(self, online: bool) -> None:
        self.state.online = online
        self._state_changed()
        if online:
            logger.info("Connection restored")
            await self._dispatcher.success("Connection restored")
            if not self.state.blocked:
                await self.refresh()
        else:
            logger.warning("Connection lost")
            await self._dispatcher.error("Connection lost. Posts will sync when reconnected.")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _spawn_later(self, factory: Callable[[], Coroutine[Any, Any, None]]) -> None:
        task = asyncio.ensure_future(factory())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _state_changed(self) -> None:
        if self._on_state_change:
            self._on_state_change()
