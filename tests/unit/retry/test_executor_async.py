r"""Unit tests for AsyncRequestExecutor."""

from __future__ import annotations

import asyncio
import logging
from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from arebound import RequestDescriptor, ResilienceConfig, TerminalRequestError
from arebound.retry import AsyncRequestExecutor
from arebound.retry.executor_async import _send_or_cancel

TEST_URL = "https://api.example.com/data"


@pytest.fixture
def descriptor() -> RequestDescriptor:
    return RequestDescriptor(url=TEST_URL, method="POST", body=b"{}")


def make_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


#####################################
#     Tests for _send_or_cancel     #
#####################################


@pytest.mark.asyncio
async def test_send_or_cancel_without_event(scripted) -> None:
    async with make_client(scripted([httpx.Response(200, json={})])) as client:
        response = await _send_or_cancel(client, client.build_request("GET", TEST_URL), None)
        assert response.status_code == 200
        await response.aclose()


@pytest.mark.asyncio
async def test_send_or_cancel_event_not_set(scripted) -> None:
    async with make_client(scripted([httpx.Response(201)])) as client:
        response = await _send_or_cancel(
            client, client.build_request("GET", TEST_URL), asyncio.Event()
        )
        assert response.status_code == 201
        await response.aclose()


@pytest.mark.asyncio
async def test_send_or_cancel_event_already_set(scripted) -> None:
    handler = scripted([httpx.Response(200)])
    cancel_event = asyncio.Event()
    cancel_event.set()
    async with make_client(handler) as client:
        assert await _send_or_cancel(client, client.build_request("GET", TEST_URL), cancel_event) is None
    assert handler.call_count == 0


@pytest.mark.asyncio
async def test_send_or_cancel_event_set_during_send() -> None:
    cancel_event = asyncio.Event()
    started = asyncio.Event()
    cancelled = Mock()

    async def handler(request: httpx.Request) -> httpx.Response:
        started.set()
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            cancelled()
            raise
        return httpx.Response(200)  # pragma: no cover

    async def cancel_when_started() -> None:
        await started.wait()
        cancel_event.set()

    async with make_client(handler) as client:
        canceller = asyncio.ensure_future(cancel_when_started())
        result = await _send_or_cancel(client, client.build_request("GET", TEST_URL), cancel_event)
        await canceller
    assert result is None
    cancelled.assert_called_once_with()


@pytest.mark.asyncio
async def test_send_or_cancel_propagates_transport_error(scripted) -> None:
    async with make_client(scripted([httpx.ConnectError("refused")])) as client:
        with pytest.raises(httpx.ConnectError):
            await _send_or_cancel(client, client.build_request("GET", TEST_URL), asyncio.Event())


@pytest.mark.asyncio
async def test_send_or_cancel_closes_response_when_caller_cancelled() -> None:
    """Test that a response sent after the caller was cancelled is
    closed."""
    responses: list[httpx.Response] = []
    caller: list[asyncio.Future] = []

    def handler(request: httpx.Request) -> httpx.Response:
        caller[0].cancel()
        responses.append(httpx.Response(200, stream=httpx.ByteStream(b"{}")))
        return responses[0]

    async with make_client(handler) as client:
        caller.append(
            asyncio.ensure_future(
                _send_or_cancel(client, client.build_request("GET", TEST_URL), asyncio.Event())
            )
        )
        with pytest.raises(asyncio.CancelledError):
            await caller[0]
    assert len(responses) == 1
    assert responses[0].is_closed


##########################################
#     Tests for AsyncRequestExecutor     #
##########################################


def test_async_request_executor_repr() -> None:
    assert repr(AsyncRequestExecutor()).startswith("AsyncRequestExecutor(config=ResilienceConfig(")


@pytest.mark.asyncio
async def test_async_request_executor_execute(
    descriptor: RequestDescriptor, scripted, mock_asleep: Mock
) -> None:
    handler = scripted([httpx.Response(200, json={"status": "ok"})])
    async with make_client(handler) as client:
        assert await AsyncRequestExecutor().execute(client, descriptor) == {"status": "ok"}
    assert handler.requests[0].method == "POST"
    assert handler.requests[0].content == b"{}"


@pytest.mark.asyncio
async def test_async_request_executor_resends_same_request(
    descriptor: RequestDescriptor, scripted, mock_asleep: Mock
) -> None:
    """Test that every attempt sends the same method, URL, headers and
    body."""
    handler = scripted(
        [httpx.ConnectError("refused"), httpx.ReadTimeout("slow"), httpx.Response(200, json=0)]
    )
    async with make_client(handler) as client:
        assert await AsyncRequestExecutor().execute(client, descriptor) == 0
    assert handler.call_count == 3
    assert len({(r.method, str(r.url), r.content) for r in handler.requests}) == 1


@pytest.mark.asyncio
async def test_async_request_executor_does_not_read_rate_limited_body(
    descriptor: RequestDescriptor, scripted, failing_body, mock_asleep: Mock, no_jitter: Mock
) -> None:
    handler = scripted(
        [httpx.Response(429, stream=failing_body()), httpx.Response(200, json={"ok": True})]
    )
    async with make_client(handler) as client:
        assert await AsyncRequestExecutor().execute(client, descriptor) == {"ok": True}
    mock_asleep.assert_called_once_with(1.0)


@pytest.mark.asyncio
async def test_async_request_executor_logs_body_read_failure(
    descriptor: RequestDescriptor, scripted, failing_body, caplog: pytest.LogCaptureFixture
) -> None:
    handler = scripted([httpx.Response(400, stream=failing_body())])
    with caplog.at_level(logging.WARNING, logger="arebound"):
        async with make_client(handler) as client:
            with pytest.raises(TerminalRequestError) as exc_info:
                await AsyncRequestExecutor().execute(client, descriptor)
    assert exc_info.value.body_text == ""
    assert "Could not read the body of a 400 response" in caplog.text


@pytest.mark.asyncio
async def test_async_request_executor_uses_wait_async(
    descriptor: RequestDescriptor, scripted, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Test that the waits go through the cancellable wait helper."""
    wait_async = AsyncMock(return_value=True)
    monkeypatch.setattr("arebound.retry.executor_async.wait_async", wait_async)
    handler = scripted([httpx.ConnectError("refused"), httpx.Response(200, json={})])
    cancel_event = asyncio.Event()
    async with make_client(handler) as client:
        await AsyncRequestExecutor(ResilienceConfig(base_delay=0.5)).execute(
            client, descriptor, cancel_event=cancel_event
        )
    wait_async.assert_awaited_once_with(0.5, cancel_event)
