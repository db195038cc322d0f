r"""Synchronous resilient request executor."""

from __future__ import annotations

__all__ = ["RequestExecutor"]

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
from arebound.utils.sleep import wait

if TYPE_CHECKING:
    import threading

    from arebound.descriptor import RequestDescriptor
    from arebound.retry.outcome import AttemptOutcome

logger: logging.Logger = logging.getLogger(__name__)


class RequestExecutor(BaseRequestExecutor):
    """Executes requests on a sync client with automatic retries.

    Same policy as ``AsyncRequestExecutor``, with blocking waits. A
    cancel event is honoured before each attempt and during waits; an
    attempt already in flight runs until the transport timeout.

    Args:
        config: The resilience policy. Defaults to ``ResilienceConfig()``.
        callbacks: Optional lifecycle callbacks.

    Example:
        ```pycon
        >>> import httpx
        >>> from arebound import RequestDescriptor
        >>> from arebound.retry import RequestExecutor
        >>> with httpx.Client(timeout=10.0) as client:
        ...     body = RequestExecutor().execute(
        ...         client, RequestDescriptor(url="https://api.example.com/data")
        ...     )  # doctest: +SKIP
        ...

        ```
    """

    def execute(
        self,
        client: httpx.Client,
        descriptor: RequestDescriptor,
        *,
        cancel_event: threading.Event | None = None,
    ) -> Any:
        """Execute the request with automatic retry logic.

        Args:
            client: The client used to send every attempt.
            descriptor: The request to perform.
            cancel_event: Optional event; setting it abandons the pending
                wait and raises ``RequestCancelledError``.

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

            outcome = self._attempt(client, descriptor, attempt, start_time)
            if isinstance(outcome, Success):
                return self._succeed(descriptor, attempt, outcome, start_time)
            last_outcome = outcome

            wait_time = self._schedule_retry(descriptor, attempt, outcome, start_time)
            if not wait(wait_time, cancel_event):
                self._cancel(descriptor, attempt + 1, start_time)

        # Unreachable: the last attempt either returns or raises above
        msg = f"retry loop ended without a result, last outcome: {last_outcome!r}"
        raise RuntimeError(msg)  # pragma: no cover

    def _attempt(
        self,
        client: httpx.Client,
        descriptor: RequestDescriptor,
        attempt: int,
        start_time: float,
    ) -> AttemptOutcome:
        request = descriptor.build_request(client)
        try:
            response = client.send(request, stream=True)
        except httpx.TransportError as exc:
            return classify_exception(exc)

        try:
            body_read = self._read_body(response)
        except httpx.TransportError as exc:
            return classify_exception(exc)
        except httpx.DecodingError as exc:
            self._reject_body(descriptor, attempt, response.status_code, start_time, exc)
        finally:
            response.close()
        return classify_response(response, body_read)

    def _read_body(self, response: httpx.Response) -> bool:
        if not should_read_body(response.status_code):
            return False
        try:
            response.read()
        except httpx.RequestError as exc:
            if is_success_status(response.status_code):
                raise
            self._log_body_read_failure(response, exc)
            return False
        return True
