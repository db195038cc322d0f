r"""Lifecycle events reported to caller-provided hooks.

Each hook of ``CallbackConfig`` receives one frozen info object:

- ``on_request``: ``RequestInfo``, before an attempt is sent
- ``on_retry``: ``RetryInfo``, once a wait before the next attempt is known
- ``on_success``: ``ResponseInfo``, with the 2xx response
- ``on_failure``: ``FailureInfo``, with the error about to be raised

Attempt numbers are counted from 1.

Example:
    ```pycon
    >>> from arebound import RequestDescriptor, execute
    >>> from arebound.callbacks import RetryInfo
    >>> from arebound.retry import CallbackConfig
    >>> def report(info: RetryInfo) -> None:
    ...     print(f"{info.outcome}: attempt {info.attempt} in {info.wait_time:.1f}s")
    ...
    >>> body = execute(
    ...     RequestDescriptor(url="https://api.example.com/data"),
    ...     callbacks=CallbackConfig(on_retry=report),
    ... )  # doctest: +SKIP

    ```
"""

from __future__ import annotations

__all__ = ["FailureInfo", "RequestInfo", "ResponseInfo", "RetryInfo"]

from dataclasses import dataclass
from typing import TYPE_CHECKING

from arebound.retry.outcome import NetworkError

if TYPE_CHECKING:
    import httpx

    from arebound.retry.outcome import RateLimited


@dataclass(frozen=True)
class RequestInfo:
    """An attempt is about to be sent.

    Attributes:
        url: Target URL.
        method: HTTP method.
        attempt: Number of this attempt.
        max_retries: Retry budget of the invocation.
    """

    url: str
    method: str
    attempt: int
    max_retries: int


@dataclass(frozen=True)
class RetryInfo:
    """A retryable attempt failed and the executor is about to wait.

    Attributes:
        url: Target URL.
        method: HTTP method.
        attempt: Number of the attempt that follows the wait.
        max_retries: Retry budget of the invocation.
        wait_time: Seconds until that attempt.
        outcome: ``"rate_limited"`` or ``"network_error"``.
        error: Transport exception of a network error, else ``None``.
        status_code: 429 for a rate-limited attempt, else ``None``.
    """

    url: str
    method: str
    attempt: int
    max_retries: int
    wait_time: float
    outcome: str
    error: Exception | None
    status_code: int | None

    @classmethod
    def from_outcome(
        cls,
        url: str,
        method: str,
        next_attempt: int,
        max_retries: int,
        wait_time: float,
        outcome: NetworkError | RateLimited,
    ) -> RetryInfo:
        """Describe the wait that follows a retryable outcome.

        Example:
            ```pycon
            >>> from arebound.callbacks import RetryInfo
            >>> from arebound.retry import RateLimited
            >>> info = RetryInfo.from_outcome(
            ...     "https://api.example.com/data",
            ...     "GET",
            ...     next_attempt=2,
            ...     max_retries=5,
            ...     wait_time=3.0,
            ...     outcome=RateLimited(status_code=429, retry_after=3.0),
            ... )
            >>> info.outcome, info.status_code, info.error
            ('rate_limited', 429, None)

            ```
        """
        return cls(
            url=url,
            method=method,
            attempt=next_attempt,
            max_retries=max_retries,
            wait_time=wait_time,
            outcome=outcome.kind,
            error=outcome.cause if isinstance(outcome, NetworkError) else None,
            status_code=outcome.status_code,
        )


@dataclass(frozen=True)
class ResponseInfo:
    """The invocation ended with a 2xx response.

    ``total_time`` includes every wait between attempts.
    """

    url: str
    method: str
    attempt: int
    max_retries: int
    response: httpx.Response
    total_time: float


@dataclass(frozen=True)
class FailureInfo:
    """The invocation ended with ``error``, which is raised right after
    the hook returns."""

    url: str
    method: str
    attempt: int
    max_retries: int
    error: Exception
    status_code: int | None
    total_time: float
