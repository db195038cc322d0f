r"""Asynchronous resilient request executor.

This module provides the ``AsyncRequestExecutor`` class that performs a
request described by a ``RequestDescriptor`` on an ``httpx.AsyncClient``
and retries transport failures and rate-limited responses.
"""

from __future__ import annotations

__all__ = ["AsyncRequestExecutor"]

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Any

import httpx

from arebound.retry.executor_core import BaseRequestExecutor, should_read_body
from arebound.retry.outcome import (
    Success,
    classify_exception,
    classify_response,
    is_success_status,
)
from arebound.utils.sleep import wait_async

if TYPE_CHECKING:
    from arebound.descriptor import RequestDescriptor
    from arebound.retry.outcome import AttemptOutcome

logger: logging.Logger = logging.getLogger(__name__)


async def _send_or_cancel(
    client: httpx.AsyncClient,
    request: httpx.Request,
    cancel_event: asyncio.Event | None,
) -> httpx.Response | None:
    """Send ``request`` unless ``cancel_event`` is set first.

    Returns:
        The streamed response, or ``None`` if the request was cancelled.
    """
    if cancel_event is None:
        return await client.send(request, stream=True)
    if cancel_event.is_set():
        return None

    send_task = asyncio.ensure_future(client.send(request, stream=True))
    cancel_task = asyncio.ensure_future(cancel_event.wait())
    response: httpx.Response | None = None
    try:
        await asyncio.wait({send_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED)
        if not cancel_task.done():
            response = send_task.result()
    finally:
        for task in (send_task, cancel_task):
            if not task.done():
                task.cancel()
        # Let the cancelled tasks unwind without propagating their CancelledError
        await asyncio.wait({send_task, cancel_task})
        if response is None and not send_task.cancelled() and send_task.exception() is None:
            # Sent, but not handed to the caller
            await send_task.result().aclose()
    return response


class AsyncRequestExecutor(BaseRequestExecutor):
    """Executes requests on an async client with automatic retries.

    Only transport failures (``httpx.TransportError``) and 429 responses
    are retried. A 2xx response ends the loop with its JSON body; any
    other status raises ``TerminalRequestError`` at once. Waits use
    ``asyncio.sleep`` so concurrent invocations keep running.

    Args:
        config: The resilience policy. Defaults to ``ResilienceConfig()``.
        callbacks: Optional lifecycle callbacks.

    Example:
        ```pycon
        >>> import asyncio
        >>> import httpx
        >>> from arebound import RequestDescriptor, ResilienceConfig
        >>> from arebound.retry import AsyncRequestExecutor
        >>> async def main():
        ...     executor = AsyncRequestExecutor(ResilienceConfig(max_retries=3))
        ...     async with httpx.AsyncClient(timeout=10.0) as client:
        ...         return await executor.execute(
        ...             client, RequestDescriptor(url="https://api.example.com/data")
        ...         )
        ...
        >>> asyncio.run(main())  # doctest: +SKIP

        ```
    """

    async def execute(
        self,
        client: httpx.AsyncClient,
        descriptor: RequestDescriptor,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> Any:
        """Execute the request with automatic retry logic.

        Args:
            client: The async client used to send every attempt.
            descriptor: The request to perform.
            cancel_event: Optional event; setting it aborts the in-flight
                attempt or the pending wait and raises
                ``RequestCancelledError``.

        Returns:
            The JSON-decoded body of the first 2xx response (``None`` for an
            empty body).

        Raises:
            TerminalRequestError: On a non-2xx status other than 429.
            ExhaustedRetriesError: When ``max_retries + 1`` attempts failed
                with transport errors or 429 responses.
            ResponseDecodeError: If the 2xx body is not valid JSON.
            RequestCancelledError: If ``cancel_event`` is set.
        """
        start_time = time.time()
        last_outcome: AttemptOutcome | None = None

        for attempt in range(self.config.max_attempts):
            if cancel_event is not None and cancel_event.is_set():
                self._cancel(descriptor, attempt, start_time)
            self._start_attempt(descriptor, attempt)

            outcome = await self._attempt(client, descriptor, attempt, start_time, cancel_event)
            if outcome is None:
                self._cancel(descriptor, attempt + 1, start_time)
            if isinstance(outcome, Success):
                return self._succeed(descriptor, attempt, outcome, start_time)
            last_outcome = outcome

            wait_time = self._schedule_retry(descriptor, attempt, outcome, start_time)
            if not await wait_async(wait_time, cancel_event):
                self._cancel(descriptor, attempt + 1, start_time)

        # Unreachable: the last attempt either returns or raises above
        msg = f"retry loop ended without a result, last outcome: {last_outcome!r}"
        raise RuntimeError(msg)  # pragma: no cover

    async def _attempt(
        self,
        client: httpx.AsyncClient,
        descriptor: RequestDescriptor,
        attempt: int,
        start_time: float,
        cancel_event: asyncio.Event | None,
    ) -> AttemptOutcome | None:
        """Perform and classify one attempt.

        Returns:
            The attempt outcome, or ``None`` if it was cancelled.
        """
        request = descriptor.build_request(client)
        try:
            response = await _send_or_cancel(client, request, cancel_event)
        except httpx.TransportError as exc:
            return classify_exception(exc)
        if response is None:
            return None

        try:
            body_read = await self._read_body(response)
        except httpx.TransportError as exc:
            return classify_exception(exc)
        except httpx.DecodingError as exc:
            self._reject_body(descriptor, attempt, response.status_code, start_time, exc)
        finally:
            await response.aclose()
        return classify_response(response, body_read)

    async def _read_body(self, response: httpx.Response) -> bool:
        """Read the response body when it is needed.

        Returns:
            ``True`` if the body was read.

        Raises:
            httpx.TransportError: If the body of a 2xx response could not be
                received; such an attempt got no usable response.
            httpx.DecodingError: If the body of a 2xx response could not be
                decoded.
        """
        if not should_read_body(response.status_code):
            return False
        try:
            await response.aread()
        except httpx.RequestError as exc:
            if is_success_status(response.status_code):
                raise
            self._log_body_read_failure(response, exc)
            return False
        return True
