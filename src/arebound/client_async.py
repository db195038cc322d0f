r"""Asynchronous context manager client for resilient requests.

The ``AsyncResilientClient`` owns an ``httpx.AsyncClient`` shared by all
its calls, so connections are pooled across invocations, and a default
``ResilienceConfig`` that individual calls may override.
"""

from __future__ import annotations

__all__ = ["AsyncResilientClient"]

from typing import TYPE_CHECKING, Any

import httpx

from arebound.config import DEFAULT_TIMEOUT, ResilienceConfig
from arebound.retry import AsyncRequestExecutor
from arebound.utils.validation import validate_timeout

if TYPE_CHECKING:
    import asyncio
    from types import TracebackType
    from typing import Self

    from arebound.backoff import BaseBackoffStrategy
    from arebound.descriptor import RequestDescriptor
    from arebound.retry import CallbackConfig


class AsyncResilientClient:
    r"""Asynchronous context manager for resilient requests.

    Args:
        config: Default resilience policy of the client's calls.
            If ``None``, ``ResilienceConfig()`` is used.
        callbacks: Default lifecycle callbacks of the client's calls.
        timeout: Per-attempt transport timeout in seconds. Must be > 0.
        transport: Optional httpx transport, e.g. ``httpx.MockTransport``
            in tests.

    Example:
        ```pycon
        >>> import asyncio
        >>> from arebound import AsyncResilientClient, RequestDescriptor, ResilienceConfig
        >>> async def main():
        ...     async with AsyncResilientClient(config=ResilienceConfig(max_retries=3)) as client:
        ...         first = await client.execute(RequestDescriptor(url="https://api.example.com/a"))
        ...         second = await client.execute(
        ...             RequestDescriptor(url="https://api.example.com/b"), max_retries=0
        ...         )
        ...
        >>> asyncio.run(main())  # doctest: +SKIP

        ```
    """

    def __init__(
        self,
        *,
        config: ResilienceConfig | None = None,
        callbacks: CallbackConfig | None = None,
        timeout: float | httpx.Timeout = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        validate_timeout(timeout)
        self._timeout = timeout
        self._transport = transport
        self._config = config if config is not None else ResilienceConfig()
        self._callbacks = callbacks
        self._client: httpx.AsyncClient | None = None

    @property
    def config(self) -> ResilienceConfig:
        """The default resilience policy."""
        return self._config

    async def __aenter__(self) -> Self:
        self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            msg = "AsyncResilientClient must be used within an async context manager (async with statement)"
            raise RuntimeError(msg)
        return self._client

    async def execute(
        self,
        descriptor: RequestDescriptor,
        *,
        max_retries: int | None = None,
        base_delay: float | None = None,
        max_jitter: float | None = None,
        max_wait_time: float | None = None,
        backoff_strategy: BaseBackoffStrategy | None = None,
        callbacks: CallbackConfig | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> Any:
        """Perform a request with automatic retry logic.

        Args:
            descriptor: The request to perform.
            max_retries: Override client's max_retries for this call.
            base_delay: Override client's base_delay for this call.
            max_jitter: Override client's max_jitter for this call.
            max_wait_time: Override client's max_wait_time for this call.
            backoff_strategy: Override client's backoff_strategy for this call.
            callbacks: Override client's callbacks for this call.
            cancel_event: Optional event; setting it aborts the call.

        Returns:
            The JSON-decoded body of the first 2xx response.

        Raises:
            RuntimeError: If called outside of a context manager.
            ResilientRequestError: If the call fails (see ``execute_async``).
        """
        client = self._ensure_client()
        config = self._config.merge(
            max_retries=max_retries,
            base_delay=base_delay,
            max_jitter=max_jitter,
            max_wait_time=max_wait_time,
            backoff_strategy=backoff_strategy,
        )
        executor = AsyncRequestExecutor(config, callbacks if callbacks is not None else self._callbacks)
        return await executor.execute(client, descriptor, cancel_event=cancel_event)
