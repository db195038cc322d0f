r"""Contains the synchronous entry point of the resilient request
executor."""

from __future__ import annotations

__all__ = ["execute"]

from typing import TYPE_CHECKING, Any

import httpx

from arebound.config import DEFAULT_TIMEOUT
from arebound.retry import RequestExecutor
from arebound.utils.validation import validate_timeout

if TYPE_CHECKING:
    import threading

    from arebound.config import ResilienceConfig
    from arebound.descriptor import RequestDescriptor
    from arebound.retry import CallbackConfig


def execute(
    descriptor: RequestDescriptor,
    config: ResilienceConfig | None = None,
    *,
    client: httpx.Client | None = None,
    timeout: float | httpx.Timeout = DEFAULT_TIMEOUT,
    callbacks: CallbackConfig | None = None,
    cancel_event: threading.Event | None = None,
) -> Any:
    """Perform a request with automatic retry logic and return its JSON
    body.

    Transport failures and HTTP 429 responses are retried up to
    ``config.max_retries`` times. Transport failures wait
    ``base_delay * 2 ** attempt`` seconds; 429 responses wait for the
    ``Retry-After`` value when present, or for the same backoff plus up
    to ``max_jitter`` seconds of random jitter otherwise. Every other
    non-2xx status fails at once.

    Args:
        descriptor: The request to perform.
        config: The resilience policy. Defaults to ``ResilienceConfig()``.
        client: Optional ``httpx.Client``. If not provided, a client is
            created for this call and closed before returning.
        timeout: Per-attempt transport timeout of the created client.
            Ignored if ``client`` is provided. Must be > 0.
        callbacks: Optional lifecycle callbacks.
        cancel_event: Optional event; setting it abandons the pending wait.

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
        >>> from arebound import RequestDescriptor, ResilienceConfig, execute
        >>> payment = execute(
        ...     RequestDescriptor.json(
        ...         "https://sandbox.example.com/v1/checkouts",
        ...         {"amount": 1800, "currency": "USD"},
        ...         headers={"Authorization": "Bearer <token>"},
        ...     ),
        ...     ResilienceConfig(max_retries=5, base_delay=1.0),
        ... )  # doctest: +SKIP

        ```
    """
    validate_timeout(timeout)
    executor = RequestExecutor(config, callbacks)
    if client is not None:
        return executor.execute(client, descriptor, cancel_event=cancel_event)
    with httpx.Client(timeout=timeout) as owned_client:
        return executor.execute(owned_client, descriptor, cancel_event=cancel_event)
