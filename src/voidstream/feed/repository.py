"""Post repository over the REST client, with the retry policy applied."""

from __future__ import annotations

import logging

import pydantic

from voidstream.core.logging import preview
from voidstream.feed.errors import FetchError, InsertError, ServiceError
from voidstream.feed.models import MAX_POST_LENGTH, Post, validate_content
from voidstream.feed.rest import RestClient
from voidstream.feed.retry import RetryPolicy, with_retry

logger = logging.getLogger(__name__)


class PostRepository:
    """List and create posts in the remote ``posts`` collection."""

    def __init__(
        self,
        rest: RestClient,
        table: str = "posts",
        retry: RetryPolicy | None = None,
        max_length: int = MAX_POST_LENGTH,
    ) -> None:
        self._rest = rest
        self._table = table
        self._retry = retry or RetryPolicy()
        self._max_length = max_length

    @property
    def table(self) -> str:
        return self._table

    async def probe(self) -> None:
        """Single-row read used as a health check. Not retried."""
        await self._rest.select(self._table, columns="id", limit=1)

    async def list_posts(self) -> list[Post]:
        """Return all posts, newest first."""
        try:
            rows = await with_retry(
                lambda: self._rest.select(self._table, order="created_at", descending=True),
                self._retry,
                label="list posts",
            )
        except ServiceError as exc:
            raise FetchError(f"Could not load posts: {exc}") from exc

        try:
            return [Post.model_validate(row) for row in rows]
        except pydantic.ValidationError as exc:
            raise FetchError(f"Backend returned a malformed post: {exc}") from exc

    async def create_post(self, content: str) -> None:
        """Validate locally, then insert. Raises ValidationError before any request."""
        text = validate_content(content, self._max_length)
        try:
            await with_retry(
                lambda: self._rest.insert(self._table, [{"content": text}]),
                self._retry,
                label="create post",
            )
        except ServiceError as exc:
            raise InsertError(f"Could not create post: {exc}") from exc
        logger.info("Post created: %s", preview(text))
