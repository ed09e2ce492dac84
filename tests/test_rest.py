"""Tests for the PostgREST client."""

from __future__ import annotations

import json

import httpx
import pytest

from voidstream.feed.errors import ServiceError
from voidstream.feed.rest import RestClient

REST_URL = "https://example.supabase.co/rest/v1"


def _client(handler) -> RestClient:
    return RestClient(REST_URL, "anon-key", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_select_builds_ordered_query():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[{"id": 1, "content": "a", "created_at": "2026-10-18T12:00:00Z"}])

    rest = _client(handler)
    rows = await rest.select("posts", order="created_at", descending=True)
    await rest.aclose()

    assert rows[0]["id"] == 1
    request = seen[0]
    assert request.url.path == "/rest/v1/posts"
    assert request.url.params["select"] == "*"
    assert request.url.params["order"] == "created_at.desc"
    assert request.headers["apikey"] == "anon-key"
    assert request.headers["authorization"] == "Bearer anon-key"


@pytest.mark.asyncio
async def test_select_with_limit():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    rest = _client(handler)
    await rest.select("posts", columns="id", limit=1)
    await rest.aclose()

    assert seen[0].url.params["select"] == "id"
    assert seen[0].url.params["limit"] == "1"
    assert "order" not in seen[0].url.params


@pytest.mark.asyncio
async def test_insert_posts_rows_with_minimal_return():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201)

    rest = _client(handler)
    await rest.insert("posts", [{"content": "hello void"}])
    await rest.aclose()

    request = seen[0]
    assert request.method == "POST"
    assert request.headers["prefer"] == "return=minimal"
    assert json.loads(request.content) == [{"content": "hello void"}]


@pytest.mark.asyncio
async def test_http_error_becomes_service_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"message": "Invalid API key"})

    rest = _client(handler)
    with pytest.raises(ServiceError) as exc_info:
        await rest.select("posts")
    await rest.aclose()

    assert exc_info.value.status_code == 401
    assert "Invalid API key" in str(exc_info.value)


@pytest.mark.asyncio
async def test_transport_error_becomes_service_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    rest = _client(handler)
    with pytest.raises(ServiceError) as exc_info:
        await rest.insert("posts", [{"content": "x"}])
    await rest.aclose()

    assert exc_info.value.status_code is None


@pytest.mark.asyncio
async def test_non_list_body_is_rejected():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"unexpected": True})

    rest = _client(handler)
    with pytest.raises(ServiceError, match="Expected a list"):
        await rest.select("posts")
    await rest.aclose()
