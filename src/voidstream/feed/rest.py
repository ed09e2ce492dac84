"""Minimal PostgREST client for the hosted posts collection."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from voidstream.core.http import make_httpx_client
from voidstream.feed.errors import ServiceError

logger = logging.getLogger(__name__)


def _error_message(resp: httpx.Response) -> str:
    """Pull the most useful message out of a PostgREST error body."""
    try:
        data = resp.json()
    except ValueError:
        return f"HTTP {resp.status_code}: {resp.text[:200]}"
    if isinstance(data, dict):
        detail = data.get("message") or data.get("error") or data.get("hint")
        if detail:
            return f"HTTP {resp.status_code}: {detail}"
    return f"HTTP {resp.status_code}"


class RestClient:
    """Talks to ``{project_url}/rest/v1`` with the public API key."""

    def __init__(
        self,
        rest_url: str,
        api_key: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        kwargs: dict[str, Any] = {
            "base_url": rest_url.rstrip("/"),
            "headers": {
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
            },
            "timeout": timeout,
        }
        if transport is not None:
            kwargs["transport"] = transport
        self._client = make_httpx_client(**kwargs)

    async def select(
        self,
        table: str,
        columns: str = "*",
        order: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        params: dict[str, str] = {"select": columns}
        if order:
            params["order"] = f"{order}.{'desc' if descending else 'asc'}"
        if limit is not None:
            params["limit"] = str(limit)
        resp = await self._request("GET", f"/{table}", params=params)
        try:
            rows = resp.json()
        except ValueError as exc:
            raise ServiceError(f"Malformed response from /{table}") from exc
        if not isinstance(rows, list):
            raise ServiceError(f"Expected a list of rows from /{table}")
        return rows

    async def insert(self, table: str, rows: list[dict[str, Any]]) -> None:
        await self._request(
            "POST",
            f"/{table}",
            json=rows,
            headers={"Prefer": "return=minimal"},
        )

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise ServiceError(f"{method} {path}: {exc!r}") from exc
        if resp.status_code >= 400:
            raise ServiceError(_error_message(resp), status_code=resp.status_code)
        return resp

    async def aclose(self) -> None:
        await self._client.aclose()
