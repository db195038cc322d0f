r"""Contains the asynchronous entry point of the resilient request
executor."""

from __future__ import annotations

__all__ = ["execute_async"]

from typing import TYPE_CHECKING, Any

import httpx

from arebound.config import DEFAULT_TIMEOUT
from arebound.retry import AsyncRequestExecutor
from arebound.utils.validation import validate_timeout

if TYPE_CHECKING:
    import asyncio

    from arebound.config import ResilienceConfig
    from arebound.descriptor import RequestDescriptor
    from arebound.retry import CallbackConfig


async def execute_async(
    descriptor: RequestDescriptor,
    config: ResilienceConfig | None = None,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float | httpx.Timeout = DEFAULT_TIMEOUT,
    callbacks: CallbackConfig | None = None,
    cancel_event: asyncio.Event | None = None,
) -> Any:
    """Perform an async request with automatic retry logic and return
    its JSON body.

    This is the non-blocking twin of ``arebound.execute``: the policy is
    identical, and waits between attempts suspend only the calling task.

    Args:
        descriptor: The request to perform.
        config: The resilience policy. Defaults to ``ResilienceConfig()``.
        client: Optional ``httpx.AsyncClient``. If not provided, a client is
            created for this call and closed before returning.
        timeout: Per-attempt transport timeout of the created client.
            Ignored if ``client`` is provided. Must be > 0.
        callbacks: Optional lifecycle callbacks.
        cancel_event: Optional event; setting it aborts the in-flight
            attempt or the pending wait.

    Returns:
        The JSON-decoded body of the first 2xx response (``None`` for an
        empty body).

    Raises:
        TerminalRequestError: On a non-2xx status other than 429.
        ExhaustedRetriesError: When every attempt failed with a transport
            error or a 429 response.
        ResponseDecodeError: If the 2xx body is not valid JSON.
        RequestCancelledError: If ``cancel_event`` is set.
        ValueError: If ``timeout`` is not positive.

    Example:
        ```pycon
        >>> import asyncio
        >>> from arebound import RequestDescriptor, execute_async
        >>> async def main():
        ...     return await execute_async(
        ...         RequestDescriptor(url="https://api.example.com/data")
        ...     )
        ...
        >>> asyncio.run(main())  # doctest: +SKIP

        ```
    """
    validate_timeout(timeout)
    executor = AsyncRequestExecutor(config, callbacks)
    if client is not None:
        return await executor.execute(client, descriptor, cancel_event=cancel_event)
    async with httpx.AsyncClient(timeout=timeout) as owned_client:
        return await executor.execute(owned_client, descriptor, cancel_event=cancel_event)
