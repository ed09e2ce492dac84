"""Session-scoped feed state owned by the controller."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ConnectionStatus(str, Enum):
    CHECKING = "checking"
    CONNECTED = "connected"
    ERROR = "error"


class SubmissionState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"


@dataclass
class FeedState:
    connection: ConnectionStatus = ConnectionStatus.CHECKING
    submission: SubmissionState = SubmissionState.IDLE
    in_flight: int = 0
    visible: bool = True
    online: bool = True
    live: bool = False
    # Fetch tickets: a result is drawn only if its ticket beats the last drawn one
    fetch_seq: int = 0
    rendered_seq: int = 0

    @property
    def blocked(self) -> bool:
        return self.connection is ConnectionStatus.ERROR

    @property
    def loading(self) -> bool:
        return self.in_flight > 0

    @property
    def submitting(self) -> bool:
        return self.submission is SubmissionState.SUBMITTING

    def next_ticket(self) -> int:
        self.fetch_seq += 1
        return self.fetch_seq
