"""Tests for HTTP client adapter."""

from unittest.mock import AsyncMock, MagicMock, Mock, patch

import aiohttp
import pytest

from serverinfo.adapters.driven.http.client import HttpClient
from serverinfo.adapters.driven.http.retry import RetryPolicy
from serverinfo.ports.http import HttpPort

__all__ = []

REQ = HttpPort(url="http://test/say", payload={"text": "hello"})


def make_post(status: int) -> MagicMock:
    """Create the async context manager returned by session.post()."""
    response = Mock()
    response.status = status
    response.reason = "reason"
    cm = MagicMock()
    cm.__aenter__ = AsyncMock(return_value=response)
    cm.__aexit__ = AsyncMock(return_value=False)
    return cm


def make_client(*statuses: int, attempts: int = 3) -> HttpClient:
    client = HttpClient(retry_policy=RetryPolicy(attempts=attempts, delays_sec=(0.1,)))
    client.session = Mock()
    client.session.post = Mock(side_effect=[make_post(s) for s in statuses])
    return client


@pytest.mark.asyncio
async def test_http_client_context_manager() -> None:
    """HTTP client should initialize and close session."""
    client = HttpClient()
    assert client.session is None

    async with client as c:
        assert c.session is not None
        assert c is client

    assert client.session.closed


@pytest.mark.asyncio
async def test_http_client_posts_json_and_releases_response() -> None:
    """The response should be consumed inside the request."""
    cm = make_post(204)
    client = HttpClient()
    client.session = Mock()
    client.session.post = Mock(return_value=cm)

    status = await client.request(REQ)

    assert status == 204
    client.session.post.assert_called_once_with("http://test/say", json={"text": "hello"})
    cm.__aexit__.assert_awaited_once()


@pytest.mark.asyncio
async def test_http_client_retries_server_errors() -> None:
    """5xx answers should be retried until the webhook accepts."""
    client = make_client(503, 502, 200)

    with patch("serverinfo.adapters.driven.http.retry.asyncio.sleep", new=AsyncMock()) as mock_sleep:
        status = await client.request(REQ)

    assert status == 200
    assert client.session.post.call_count == 3
    assert mock_sleep.await_count == 2


@pytest.mark.asyncio
async def test_http_client_gives_up_on_persistent_server_errors() -> None:
    """The last 5xx should propagate once every attempt failed."""
    client = make_client(500, 500, attempts=2)

    with (
        patch("serverinfo.adapters.driven.http.retry.asyncio.sleep", new=AsyncMock()),
        pytest.raises(aiohttp.ClientResponseError) as exc_info,
    ):
        await client.request(REQ)

    assert exc_info.value.status == 500
    assert client.session.post.call_count == 2


@pytest.mark.asyncio
async def test_http_client_returns_client_errors_without_retry() -> None:
    """4xx answers are a rejection, not a transient failure."""
    client = make_client(404)

    status = await client.request(REQ)

    assert status == 404
    assert client.session.post.call_count == 1


@pytest.mark.asyncio
async def test_http_client_raises_if_session_not_initialized() -> None:
    """Requests outside 'async with' should raise."""
    client = HttpClient()

    with pytest.raises(RuntimeError, match="Session not initialized"):
        await client.request(REQ)
