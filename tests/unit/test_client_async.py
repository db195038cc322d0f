r"""Unit tests for the AsyncResilientClient context manager."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest

from arebound import (
    AsyncResilientClient,
    ExhaustedRetriesError,
    RequestCancelledError,
    RequestDescriptor,
    ResilienceConfig,
    TerminalRequestError,
)

TEST_URL = "https://api.example.com/data"

##########################################
#     Tests for AsyncResilientClient     #
##########################################


@pytest.mark.asyncio
async def test_async_client_execute(scripted, mock_asleep: Mock, no_jitter: Mock) -> None:
    """Test that AsyncResilientClient retries on its shared client."""
    handler = scripted([httpx.Response(429), httpx.Response(200, json={"id": 1})])
    async with AsyncResilientClient(transport=httpx.MockTransport(handler)) as client:
        assert await client.execute(RequestDescriptor(url=TEST_URL)) == {"id": 1}
    assert handler.call_count == 2
    mock_asleep.assert_called_once_with(1.0)


@pytest.mark.asyncio
async def test_async_client_closes_underlying_client() -> None:
    with patch("httpx.AsyncClient") as client_cls:
        client_cls.return_value = Mock(aclose=AsyncMock())
        async with AsyncResilientClient(timeout=5.0):
            client_cls.assert_called_once_with(timeout=5.0, transport=None)
        client_cls.return_value.aclose.assert_awaited_once_with()


@pytest.mark.asyncio
async def test_async_client_outside_context() -> None:
    client = AsyncResilientClient()
    with pytest.raises(RuntimeError, match=r"must be used within an async context manager"):
        await client.execute(RequestDescriptor(url=TEST_URL))


def test_async_client_invalid_timeout() -> None:
    with pytest.raises(ValueError, match=r"timeout must be > 0"):
        AsyncResilientClient(timeout=-2.0)


@pytest.mark.asyncio
async def test_async_client_per_call_overrides(scripted, mock_asleep: Mock) -> None:
    """Test that per-call arguments override the client's config."""
    handler = scripted([httpx.ConnectError("refused")])
    async with AsyncResilientClient(
        config=ResilienceConfig(max_retries=5), transport=httpx.MockTransport(handler)
    ) as client:
        with pytest.raises(ExhaustedRetriesError, match=r"failed after 1 attempts"):
            await client.execute(RequestDescriptor(url=TEST_URL), max_retries=0)
    assert handler.call_count == 1


@pytest.mark.asyncio
async def test_async_client_terminal_error(scripted, mock_asleep: Mock) -> None:
    handler = scripted([httpx.Response(403, text="forbidden")])
    async with AsyncResilientClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(TerminalRequestError, match=r"status 403: forbidden"):
            await client.execute(RequestDescriptor(url=TEST_URL, method="DELETE"))
    assert handler.requests[0].method == "DELETE"


@pytest.mark.asyncio
async def test_async_client_cancel_event(scripted) -> None:
    handler = scripted([httpx.Response(200, json={})])
    cancel_event = asyncio.Event()
    cancel_event.set()
    async with AsyncResilientClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(RequestCancelledError):
            await client.execute(RequestDescriptor(url=TEST_URL), cancel_event=cancel_event)
    assert handler.call_count == 0
