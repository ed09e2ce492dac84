"""Tests for per-post countdown jobs."""

from __future__ import annotations

import asyncio

import pytest

from voidstream.feed.countdown import CountdownScheduler


async def _noop() -> None:
    return None


def test_schedule_registers_job_by_post_id(countdowns: CountdownScheduler):
    countdowns.schedule(1, _noop)
    countdowns.schedule("abc", _noop)

    assert countdowns.active == {1, "abc"}
    assert countdowns.scheduler.get_job("countdown:1") is not None
    assert countdowns.scheduler.get_job("countdown:abc") is not None


def test_reschedule_replaces_existing_job(countdowns: CountdownScheduler):
    countdowns.schedule(1, _noop)
    countdowns.schedule(1, _noop)
    assert len(countdowns.scheduler.get_jobs()) == 1


def test_cancel_removes_job(countdowns: CountdownScheduler):
    countdowns.schedule(1, _noop)
    countdowns.cancel(1)

    assert countdowns.active == frozenset()
    assert countdowns.scheduler.get_job("countdown:1") is None


def test_cancel_unknown_post_is_harmless(countdowns: CountdownScheduler):
    countdowns.cancel(999)
    assert countdowns.active == frozenset()


def test_cancel_all(countdowns: CountdownScheduler):
    for post_id in range(5):
        countdowns.schedule(post_id, _noop)
    countdowns.cancel_all()

    assert countdowns.active == frozenset()
    assert countdowns.scheduler.get_jobs() == []


@pytest.mark.asyncio
async def test_running_scheduler_ticks_on_event_loop():
    ticks: list[int] = []

    async def tick() -> None:
        ticks.append(1)

    countdowns = CountdownScheduler(interval_seconds=0.05)
    countdowns.start()
    try:
        countdowns.schedule(1, tick)
        await asyncio.sleep(0.4)
    finally:
        countdowns.stop()

    assert len(ticks) >= 1
    assert not countdowns.running
    assert countdowns.active == frozenset()
