"""Tests for the fixed-delay retry policy."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from voidstream.feed.errors import ServiceError
from voidstream.feed.retry import RetryPolicy, with_retry

FAST = RetryPolicy(attempts=3, delay_seconds=0.0)


@pytest.mark.asyncio
async def test_returns_first_success():
    op = AsyncMock(return_value="ok")
    assert await with_retry(op, FAST) == "ok"
    assert op.await_count == 1


@pytest.mark.asyncio
async def test_recovers_on_second_attempt():
    op = AsyncMock(side_effect=[ServiceError("boom"), "ok"])
    assert await with_retry(op, FAST) == "ok"
    assert op.await_count == 2


@pytest.mark.asyncio
async def test_final_error_propagates_after_three_attempts():
    op = AsyncMock(side_effect=ServiceError("down", status_code=503))
    with pytest.raises(ServiceError) as exc_info:
        await with_retry(op, FAST)
    assert exc_info.value.status_code == 503
    assert op.await_count == 3


@pytest.mark.asyncio
async def test_fixed_delay_between_attempts():
    op = AsyncMock(side_effect=ServiceError("down"))
    sleep = AsyncMock()
    with patch("voidstream.feed.retry.asyncio.sleep", sleep):
        with pytest.raises(ServiceError):
            await with_retry(op, RetryPolicy(attempts=3, delay_seconds=1.0))
    # Two gaps between three attempts, no growth
    assert [c.args[0] for c in sleep.await_args_list] == [1.0, 1.0]


@pytest.mark.asyncio
async def test_other_errors_are_not_retried():
    op = AsyncMock(side_effect=KeyError("nope"))
    with pytest.raises(KeyError):
        await with_retry(op, FAST)
    assert op.await_count == 1
