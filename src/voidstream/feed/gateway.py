"""Connection gate: health-checks the backend before reads and writes."""

from __future__ import annotations

import logging

from voidstream.feed.errors import BackendConnectionError, ServiceError
from voidstream.feed.repository import PostRepository
from voidstream.feed.state import ConnectionStatus, FeedState

logger = logging.getLogger(__name__)


class ConnectionGate:
    """Tracks backend reachability in the shared ``FeedState``."""

    def __init__(self, repository: PostRepository, state: FeedState) -> None:
        self._repository = repository
        self._state = state

    @property
    def status(self) -> ConnectionStatus:
        return self._state.connection

    async def check(self) -> bool:
        """Probe the backend. Returns True when it answered."""
        try:
            await self._repository.probe()
        except ServiceError as exc:
            self._state.connection = ConnectionStatus.ERROR
            logger.error("Database connection failed: %s", exc)
            return False
        self._state.connection = ConnectionStatus.CONNECTED
        logger.info("Database connection verified")
        return True

    def mark_connected(self) -> None:
        self._state.connection = ConnectionStatus.CONNECTED

    def mark_error(self) -> None:
        self._state.connection = ConnectionStatus.ERROR

    def ensure_open(self) -> None:
        if self._state.blocked:
            raise BackendConnectionError("Database connection lost")
