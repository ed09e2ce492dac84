"""Errors raised by the feed layer."""

from __future__ import annotations


class FeedError(Exception):
    """Base class for feed errors."""


class ServiceError(FeedError):
    """A single request to the remote data service failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BackendConnectionError(FeedError):
    """The connection gate is closed; reads and writes are refused."""


class FetchError(FeedError):
    """Listing posts failed after the retry policy was exhausted."""


class InsertError(FeedError):
    """Creating a post failed after the retry policy was exhausted."""


class ValidationError(FeedError):
    """Post content was rejected locally, before any network call."""
