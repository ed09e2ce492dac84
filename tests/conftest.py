"""Shared test fixtures."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from voidstream.core.config import Settings
from voidstream.feed.countdown import CountdownScheduler
from voidstream.feed.models import Post

NOW = datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Settable clock for countdown tests."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


def make_post(post_id: int, content: str = "hello void", age: timedelta = timedelta(0)) -> Post:
    return Post(id=post_id, content=content, created_at=NOW - age)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def countdowns() -> CountdownScheduler:
    """A scheduler that is never started, so jobs stay pending and never fire."""
    return CountdownScheduler(interval_seconds=1.0)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Create Settings pointing at a temp data directory."""
    return Settings(
        SUPABASE_URL="https://example.supabase.co",
        SUPABASE_ANON_KEY="anon-test-key",
        data_dir=tmp_path,
        log_level="DEBUG",
        _env_file=None,
    )


@pytest.fixture
def mock_rest() -> AsyncMock:
    rest = AsyncMock()
    rest.select = AsyncMock(return_value=[])
    rest.insert = AsyncMock(return_value=None)
    return rest
