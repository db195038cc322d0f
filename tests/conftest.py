from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import Mock, patch

import httpx
import pytest

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Generator, Iterator, Sequence


class ScriptedHandler:
    """``httpx.MockTransport`` handler replaying scripted outcomes.

    Each item is either a response, returned as a fresh copy, or an
    exception, raised. Once the script is down to its last item, that
    item is repeated for every further request.
    """

    def __init__(self, script: Sequence[httpx.Response | Exception]) -> None:
        self.script = list(script)
        self.requests: list[httpx.Request] = []

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        item = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(item, Exception):
            raise item
        if isinstance(item.stream, FailingStream):
            return httpx.Response(item.status_code, headers=item.headers, stream=FailingStream())
        return httpx.Response(item.status_code, headers=item.headers, content=item.content)


class FailingStream(httpx.SyncByteStream, httpx.AsyncByteStream):
    """Response body stream whose reads fail at the transport level."""

    def __iter__(self) -> Iterator[bytes]:
        raise httpx.ReadError("connection reset while reading body")
        yield b""  # pragma: no cover

    async def __aiter__(self) -> AsyncIterator[bytes]:
        raise httpx.ReadError("connection reset while reading body")
        yield b""  # pragma: no cover


@pytest.fixture
def mock_sleep() -> Generator[Mock, None, None]:
    """Patch time.sleep to make tests run faster."""
    with patch("time.sleep", return_value=None) as mock:
        yield mock


@pytest.fixture
def mock_asleep() -> Generator[Mock, None, None]:
    """Patch asyncio.sleep to make tests run faster."""
    with patch("asyncio.sleep", return_value=None) as mock:
        yield mock


@pytest.fixture
def no_jitter() -> Generator[Mock, None, None]:
    """Make the rate-limit jitter deterministic (always 0)."""
    with patch("random.uniform", return_value=0.0) as mock:
        yield mock


@pytest.fixture
def scripted() -> type[ScriptedHandler]:
    """Return the scripted ``httpx.MockTransport`` handler class."""
    return ScriptedHandler


@pytest.fixture
def failing_body() -> type[FailingStream]:
    """Return a stream class whose reads raise ``httpx.ReadError``."""
    return FailingStream


@pytest.fixture
def mock_callback() -> Mock:
    """Create a mock callback function for testing callbacks."""
    return Mock()
