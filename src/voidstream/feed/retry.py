"""Fixed-count, fixed-delay retry for remote calls."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from voidstream.feed.errors import ServiceError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    attempts: int = 3
    delay_seconds: float = 1.0


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy = RetryPolicy(),
    *,
    label: str = "operation",
) -> T:
    """Run ``operation`` until it succeeds or the policy is exhausted.

    Only ``ServiceError`` is retried. The delay is constant between attempts;
    the error from the final attempt propagates unchanged.
    """
    attempts = max(1, policy.attempts)
    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except ServiceError as exc:
            if attempt >= attempts:
                logger.error("%s failed after %d attempts: %s", label, attempts, exc)
                raise
            logger.warning(
                "%s failed (attempt %d/%d): %s; retrying in %.1fs",
                label, attempt, attempts, exc, policy.delay_seconds,
            )
            await asyncio.sleep(policy.delay_seconds)
    raise AssertionError("unreachable")
