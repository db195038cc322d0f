r"""Shared core logic for the retry executors.

``BaseRequestExecutor`` holds everything the synchronous and asynchronous
executors have in common: configuration, outcome handling, error
construction, logging and callbacks. The subclasses only add the I/O,
that is sending the request, reading the body and waiting.
"""

from __future__ import annotations

__all__ = ["BaseRequestExecutor", "should_read_body"]

import logging
import time
from typing import TYPE_CHECKING, Any, NoReturn

from arebound.callbacks import FailureInfo, RequestInfo, ResponseInfo, RetryInfo
from arebound.config import RATE_LIMIT_STATUS_CODE, ResilienceConfig
from arebound.exceptions import (
    ExhaustedRetriesError,
    RequestCancelledError,
    ResponseDecodeError,
    TerminalRequestError,
)
from arebound.retry.config import CallbackConfig
from arebound.retry.outcome import NetworkError, RateLimited, Success, TerminalError
from arebound.retry.strategy import RetryStrategy
from arebound.utils.structured_logging import log_structured

if TYPE_CHECKING:
    import httpx

    from arebound.descriptor import RequestDescriptor
    from arebound.retry.outcome import AttemptOutcome

logger: logging.Logger = logging.getLogger(__name__)


def should_read_body(status_code: int) -> bool:
    """Return ``True`` if the body of a response is needed.

    Rate-limited responses are discarded unread; every other body is
    either parsed (2xx) or reported in the terminal error.
    """
    return status_code != RATE_LIMIT_STATUS_CODE


class BaseRequestExecutor:
    """Common state and outcome handling of the request executors.

    Args:
        config: The resilience policy. Defaults to ``ResilienceConfig()``.
        callbacks: Optional lifecycle callbacks.

    Attributes:
        config: The resilience policy.
        strategy: Strategy computing the waits between attempts.
        callbacks: The lifecycle hooks.
    """

    def __init__(
        self,
        config: ResilienceConfig | None = None,
        callbacks: CallbackConfig | None = None,
    ) -> None:
        self.config = config if config is not None else ResilienceConfig()
        self.strategy: RetryStrategy = RetryStrategy.from_config(self.config)
        self.callbacks: CallbackConfig = callbacks if callbacks is not None else CallbackConfig()

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(config={self.config})"

    def _log_body_read_failure(self, response: httpx.Response, exc: Exception) -> None:
        logger.warning(
            f"Could not read the body of a {response.status_code} response from "
            f"{response.request.url}: {type(exc).__name__}: {exc}"
        )

    def _start_attempt(self, descriptor: RequestDescriptor, attempt: int) -> None:
        log_structured(
            logger,
            logging.DEBUG,
            f"{descriptor.method} request to {descriptor.url}: "
            f"attempt {attempt + 1}/{self.config.max_attempts}",
            method=descriptor.method,
            url=descriptor.url,
            attempt=attempt + 1,
            max_attempts=self.config.max_attempts,
        )
        if self.callbacks.on_request is not None:
            self.callbacks.on_request(
                RequestInfo(
                    url=descriptor.url,
                    method=descriptor.method,
                    attempt=attempt + 1,
                    max_retries=self.config.max_retries,
                )
            )

    def _succeed(
        self,
        descriptor: RequestDescriptor,
        attempt: int,
        outcome: Success,
        start_time: float,
    ) -> Any:
        """Parse the body of a successful response and return it.

        An empty body is returned as ``None``.

        Raises:
            ResponseDecodeError: If the body is not valid JSON.
        """
        response = outcome.response
        if not response.content.strip():
            body = None
        else:
            try:
                body = response.json()
            except ValueError as exc:
                self._reject_body(descriptor, attempt, response.status_code, start_time, exc)

        if attempt > 0:
            logger.debug(
                f"{descriptor.method} request to {descriptor.url} succeeded on attempt "
                f"{attempt + 1}"
            )
        if self.callbacks.on_success is not None:
            self.callbacks.on_success(
                ResponseInfo(
                    url=descriptor.url,
                    method=descriptor.method,
                    attempt=attempt + 1,
                    max_retries=self.config.max_retries,
                    response=response,
                    total_time=time.time() - start_time,
                )
            )
        return body

    def _reject_body(
        self,
        descriptor: RequestDescriptor,
        attempt: int,
        status_code: int,
        start_time: float,
        exc: Exception,
    ) -> NoReturn:
        """Fail on a 2xx body that cannot be decoded.

        Covers both a broken content encoding and a body that is not JSON.
        The server answered, so the attempt is not retried.
        """
        error = ResponseDecodeError(
            method=descriptor.method,
            url=descriptor.url,
            status_code=status_code,
            attempts=attempt + 1,
        )
        self._fail(descriptor, attempt, error, status_code, start_time, exc)

    def _schedule_retry(
        self,
        descriptor: RequestDescriptor,
        attempt: int,
        outcome: AttemptOutcome,
        start_time: float,
    ) -> float:
        """Handle a failed attempt and compute the wait before the next.

        Args:
            descriptor: The request being executed.
            attempt: The attempt that just failed (0-indexed).
            outcome: Its classification (anything but ``Success``).
            start_time: Timestamp when the invocation started.

        Returns:
            The wait in seconds before the next attempt.

        Raises:
            TerminalRequestError: If the outcome is not retryable.
            ExhaustedRetriesError: If ``attempt`` was the last allowed one.
        """
        if isinstance(outcome, TerminalError):
            logger.debug(
                f"{descriptor.method} request to {descriptor.url} failed with "
                f"non-retryable status {outcome.status_code}"
            )
            error = TerminalRequestError(
                method=descriptor.method,
                url=descriptor.url,
                status_code=outcome.status_code,
                body_text=outcome.body_text,
                attempts=attempt + 1,
                response=outcome.response,
            )
            self._fail(descriptor, attempt, error, outcome.status_code, start_time)

        if not isinstance(outcome, (NetworkError, RateLimited)):  # pragma: no cover
            msg = f"unexpected attempt outcome: {outcome!r}"
            raise TypeError(msg)

        cause = outcome.cause if isinstance(outcome, NetworkError) else None
        if cause is not None:
            logger.debug(
                f"{descriptor.method} request to {descriptor.url} encountered "
                f"{type(cause).__name__} on attempt {attempt + 1}/{self.config.max_attempts}: "
                f"{cause}"
            )
        else:
            logger.debug(
                f"{descriptor.method} request to {descriptor.url} was rate limited "
                f"(attempt {attempt + 1}/{self.config.max_attempts})"
            )

        if attempt >= self.config.max_retries:
            self._exhaust(descriptor, attempt, outcome, start_time)

        wait_time = self.strategy.calculate_delay(attempt, outcome)
        log_structured(
            logger,
            logging.DEBUG,
            f"{descriptor.method} request to {descriptor.url}: waiting {wait_time:.2f}s "
            f"before attempt {attempt + 2}/{self.config.max_attempts} ({outcome.kind})",
            method=descriptor.method,
            url=descriptor.url,
            attempt=attempt + 1,
            max_attempts=self.config.max_attempts,
            outcome=outcome.kind,
            status_code=outcome.status_code,
            wait_time=wait_time,
        )
        if self.callbacks.on_retry is not None:
            self.callbacks.on_retry(
                RetryInfo.from_outcome(
                    descriptor.url,
                    descriptor.method,
                    next_attempt=attempt + 2,
                    max_retries=self.config.max_retries,
                    wait_time=wait_time,
                    outcome=outcome,
                )
            )
        return wait_time

    def _exhaust(
        self,
        descriptor: RequestDescriptor,
        attempt: int,
        outcome: NetworkError | RateLimited,
        start_time: float,
    ) -> NoReturn:
        error = ExhaustedRetriesError(
            method=descriptor.method,
            url=descriptor.url,
            attempts=attempt + 1,
            reason=outcome.kind,
            status_code=outcome.status_code,
        )
        cause = outcome.cause if isinstance(outcome, NetworkError) else None
        self._fail(descriptor, attempt, error, outcome.status_code, start_time, cause)

    def _cancel(self, descriptor: RequestDescriptor, attempts: int, start_time: float) -> NoReturn:
        error = RequestCancelledError(
            method=descriptor.method,
            url=descriptor.url,
            attempts=attempts,
        )
        self._fail(descriptor, max(attempts - 1, 0), error, None, start_time)

    def _fail(
        self,
        descriptor: RequestDescriptor,
        attempt: int,
        error: Exception,
        status_code: int | None,
        start_time: float,
        cause: BaseException | None = None,
    ) -> NoReturn:
        log_structured(
            logger,
            logging.WARNING,
            str(error),
            method=descriptor.method,
            url=descriptor.url,
            attempt=attempt + 1,
            max_attempts=self.config.max_attempts,
            status_code=status_code,
            total_time=time.time() - start_time,
        )
        if self.callbacks.on_failure is not None:
            self.callbacks.on_failure(
                FailureInfo(
                    url=descriptor.url,
                    method=descriptor.method,
                    attempt=attempt + 1,
                    max_retries=self.config.max_retries,
                    error=error,
                    status_code=status_code,
                    total_time=time.time() - start_time,
                )
            )
        if cause is not None:
            raise error from cause
        raise error
