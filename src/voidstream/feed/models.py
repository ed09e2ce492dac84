"""Post record and time-to-live math."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import Enum

from pydantic import BaseModel, field_validator

from voidstream.feed.errors import ValidationError

MAX_POST_LENGTH = 500
POST_TTL = timedelta(hours=24)
EXPIRED_LABEL = "EXPIRED"

_MS_PER_HOUR = 3_600_000
_MS_PER_MINUTE = 60_000
_MS_PER_SECOND = 1_000


class Urgency(str, Enum):
    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"
    EXPIRED = "expired"


class Post(BaseModel):
    id: int | str
    content: str
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # "timestamp without time zone" columns come back naive
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def expires_at(self, ttl: timedelta = POST_TTL) -> datetime:
        return self.created_at + ttl

    def remaining_ms(self, now: datetime, ttl: timedelta = POST_TTL) -> int:
        """Milliseconds until expiry; negative once the post has expired."""
        delta = self.expires_at(ttl) - now
        return delta // timedelta(milliseconds=1)

    def is_expired(self, now: datetime, ttl: timedelta = POST_TTL) -> bool:
        return self.remaining_ms(now, ttl) < 0


def format_remaining(distance_ms: int) -> str:
    """Render a remaining distance as ``Hh Mm Ss``, or EXPIRED below zero."""
    if distance_ms < 0:
        return EXPIRED_LABEL
    hours = distance_ms // _MS_PER_HOUR
    minutes = (distance_ms % _MS_PER_HOUR) // _MS_PER_MINUTE
    seconds = (distance_ms % _MS_PER_MINUTE) // _MS_PER_SECOND
    return f"{hours}h {minutes}m {seconds}s"


def urgency_for(distance_ms: int) -> Urgency:
    if distance_ms < 0:
        return Urgency.EXPIRED
    if distance_ms < _MS_PER_HOUR:
        return Urgency.CRITICAL
    if distance_ms < 6 * _MS_PER_HOUR:
        return Urgency.WARNING
    return Urgency.HEALTHY


def validate_content(raw: str, max_length: int = MAX_POST_LENGTH) -> str:
    """Trim and check post content. Returns the text that should be inserted."""
    content = (raw or "").strip()
    if not content:
        raise ValidationError("Transmission cannot be empty")
    if len(content) > max_length:
        raise ValidationError(f"Transmission too long (max {max_length} characters)")
    return content
