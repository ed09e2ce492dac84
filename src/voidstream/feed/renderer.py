"""Feed renderer: posts in, visible elements with live countdowns out."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from voidstream.feed.countdown import CountdownScheduler
from voidstream.feed.models import (
    EXPIRED_LABEL,
    POST_TTL,
    Post,
    Urgency,
    format_remaining,
    urgency_for,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class PostElement:
    post: Post
    ttl_label: str = ""
    urgency: Urgency = Urgency.HEALTHY
    fading: bool = False

    @property
    def expired(self) -> bool:
        return self.urgency is Urgency.EXPIRED


class FeedRenderer:
    """Holds the visible feed and drives one countdown per element.

    The renderer does not draw anything itself; surfaces read ``elements``
    and redraw when ``on_update`` fires.
    """

    def __init__(
        self,
        countdowns: CountdownScheduler,
        clock: Clock = utc_now,
        ttl: timedelta = POST_TTL,
        fade_seconds: float = 2.0,
        on_update: Callable[[], None] | None = None,
    ) -> None:
        self._countdowns = countdowns
        self._clock = clock
        self._ttl = ttl
        self._fade_seconds = fade_seconds
        self._on_update = on_update
        self._elements: dict[int | str, PostElement] = {}
        self._fades: dict[int | str, asyncio.TimerHandle] = {}
        self._rendered = False

    @property
    def elements(self) -> list[PostElement]:
        return list(self._elements.values())

    @property
    def is_empty(self) -> bool:
        """True once a render produced no posts (the empty-state message)."""
        return self._rendered and not self._elements

    def set_on_update(self, callback: Callable[[], None] | None) -> None:
        self._on_update = callback

    def render(self, posts: list[Post]) -> None:
        """Replace the whole feed, keeping the given order."""
        self.cancel_all()
        self._elements = {}
        self._rendered = True
        for post in posts:
            self._elements[post.id] = PostElement(post=post)
            self._tick(post.id)
            if post.id in self._elements and not self._elements[post.id].expired:
                self._countdowns.schedule(post.id, self._make_tick(post.id))
        logger.debug("Rendered %d posts", len(self._elements))
        self._changed()

    def cancel_all(self) -> None:
        """Stop every countdown and pending fade-out."""
        self._countdowns.cancel_all()
        for handle in self._fades.values():
            handle.cancel()
        self._fades.clear()

    def _make_tick(self, post_id: int | str):
        async def tick() -> None:
            self._tick(post_id)

        return tick

    def _tick(self, post_id: int | str) -> None:
        element = self._elements.get(post_id)
        if element is None:
            self._countdowns.cancel(post_id)
            return

        distance = element.post.remaining_ms(self._clock(), self._ttl)
        element.urgency = urgency_for(distance)

        if distance < 0:
            element.ttl_label = EXPIRED_LABEL
            self._countdowns.cancel(post_id)
            if not element.fading:
                element.fading = True
                self._schedule_removal(post_id)
        else:
            element.ttl_label = format_remaining(distance)
        self._changed()

    def _schedule_removal(self, post_id: int | str) -> None:
        loop = asyncio.get_running_loop()
        self._fades[post_id] = loop.call_later(self._fade_seconds, self._remove, post_id)

    def _remove(self, post_id: int | str) -> None:
        self._fades.pop(post_id, None)
        if self._elements.pop(post_id, None) is not None:
            logger.debug("Expired post %s removed from feed", post_id)
            self._changed()

    def _changed(self) -> None:
        if self._on_update:
            self._on_update()
