r"""Synchronous context manager client for resilient requests."""

from __future__ import annotations

__all__ = ["ResilientClient"]

from typing import TYPE_CHECKING, Any

import httpx

from arebound.config import DEFAULT_TIMEOUT, ResilienceConfig
from arebound.retry import RequestExecutor
from arebound.utils.validation import validate_timeout

if TYPE_CHECKING:
    import threading
    from types import TracebackType
    from typing import Self

    from arebound.backoff import BaseBackoffStrategy
    from arebound.descriptor import RequestDescriptor
    from arebound.retry import CallbackConfig


class ResilientClient:
    r"""Context manager for resilient requests sharing one
    ``httpx.Client``.

    Args:
        config: Default resilience policy of the client's calls.
            If ``None``, ``ResilienceConfig()`` is used.
        callbacks: Default lifecycle callbacks of the client's calls.
        timeout: Per-attempt transport timeout in seconds. Must be > 0.
        transport: Optional httpx transport, e.g. ``httpx.MockTransport``
            in tests.

    Example:
        ```pycon
        >>> from arebound import RequestDescriptor, ResilientClient
        >>> with ResilientClient(timeout=30) as client:  # doctest: +SKIP
        ...     body = client.execute(RequestDescriptor(url="https://api.example.com/data"))
        ...

        ```
    """

    def __init__(
        self,
        *,
        config: ResilienceConfig | None = None,
        callbacks: CallbackConfig | None = None,
        timeout: float | httpx.Timeout = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        validate_timeout(timeout)
        self._timeout = timeout
        self._transport = transport
        self._config = config if config is not None else ResilienceConfig()
        self._callbacks = callbacks
        self._client: httpx.Client | None = None

    @property
    def config(self) -> ResilienceConfig:
        """The default resilience policy."""
        return self._config

    def __enter__(self) -> Self:
        self._client = httpx.Client(timeout=self._timeout, transport=self._transport)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def _ensure_client(self) -> httpx.Client:
        if self._client is None:
            msg = "ResilientClient must be used within a context manager (with statement)"
            raise RuntimeError(msg)
        return self._client

    def execute(
        self,
        descriptor: RequestDescriptor,
        *,
        max_retries: int | None = None,
        base_delay: float | None = None,
        max_jitter: float | None = None,
        max_wait_time: float | None = None,
        backoff_strategy: BaseBackoffStrategy | None = None,
        callbacks: CallbackConfig | None = None,
        cancel_event: threading.Event | None = None,
    ) -> Any:
        """Perform a request with automatic retry logic.

        Per-call keyword arguments override the client's configuration
        for this call only.

        Returns:
            The JSON-decoded body of the first 2xx response.

        Raises:
            RuntimeError: If called outside of a context manager.
            ResilientRequestError: If the call fails (see ``execute``).
        """
        client = self._ensure_client()
        config = self._config.merge(
            max_retries=max_retries,
            base_delay=base_delay,
            max_jitter=max_jitter,
            max_wait_time=max_wait_time,
            backoff_strategy=backoff_strategy,
        )
        executor = RequestExecutor(config, callbacks if callbacks is not None else self._callbacks)
        return executor.execute(client, descriptor, cancel_event=cancel_event)
