r"""Classification of a single request attempt.

Each attempt produces exactly one ``AttemptOutcome``. Deciding *what
happened* lives here; deciding *what to do about it* (wait, retry, raise)
belongs to ``RetryStrategy`` and the executors.
"""

from __future__ import annotations

__all__ = [
    "AttemptOutcome",
    "NetworkError",
    "RateLimited",
    "Success",
    "TerminalError",
    "classify_exception",
    "classify_response",
    "is_success_status",
]

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Union

from arebound.config import RATE_LIMIT_STATUS_CODE
from arebound.utils.retry_after import parse_retry_after

if TYPE_CHECKING:
    import httpx


@dataclass(frozen=True)
class Success:
    """The server answered with a 2xx status and its body was read."""

    kind: ClassVar[str] = "success"
    retryable: ClassVar[bool] = False

    response: httpx.Response

    @property
    def status_code(self) -> int:
        return self.response.status_code


@dataclass(frozen=True)
class RateLimited:
    """The server answered 429 Too Many Requests.

    Attributes:
        status_code: Always 429.
        retry_after: The wait in seconds requested through the Retry-After
            header, or ``None`` if absent or unparseable.
    """

    kind: ClassVar[str] = "rate_limited"
    retryable: ClassVar[bool] = True

    status_code: int
    retry_after: float | None


@dataclass(frozen=True)
class NetworkError:
    """No usable response was received (connection, DNS, timeout, ...)."""

    kind: ClassVar[str] = "network_error"
    retryable: ClassVar[bool] = True

    cause: Exception

    @property
    def status_code(self) -> None:
        return None


@dataclass(frozen=True)
class TerminalError:
    """The server answered with a non-retryable non-2xx status.

    Attributes:
        status_code: The HTTP status code.
        body_text: The response body as text, empty if it could not be read.
        response: The HTTP response.
    """

    kind: ClassVar[str] = "terminal_error"
    retryable: ClassVar[bool] = False

    status_code: int
    body_text: str
    response: httpx.Response


AttemptOutcome = Union[Success, RateLimited, NetworkError, TerminalError]


def is_success_status(status_code: int) -> bool:
    """Return ``True`` for 2xx status codes.

    Example:
        ```pycon
        >>> from arebound.retry.outcome import is_success_status
        >>> is_success_status(201), is_success_status(302), is_success_status(429)
        (True, False, False)

        ```
    """
    return 200 <= status_code < 300


def classify_response(response: httpx.Response, body_read: bool = True) -> AttemptOutcome:
    """Classify an attempt that received a response.

    Args:
        response: The HTTP response. Its body must have been read unless
            ``body_read`` is ``False``.
        body_read: Whether the body is available. A non-2xx response whose
            body could not be read is still terminal, with empty body text.

    Returns:
        ``Success`` for 2xx, ``RateLimited`` for 429 and ``TerminalError``
        for any other status.

    Example:
        ```pycon
        >>> import httpx
        >>> from arebound.retry.outcome import classify_response
        >>> classify_response(httpx.Response(429, headers={"Retry-After": "2"}))
        RateLimited(status_code=429, retry_after=2.0)
        >>> classify_response(httpx.Response(401, text="denied")).body_text
        'denied'

        ```
    """
    status_code = response.status_code
    if is_success_status(status_code):
        return Success(response=response)
    if status_code == RATE_LIMIT_STATUS_CODE:
        return RateLimited(
            status_code=status_code,
            retry_after=parse_retry_after(response.headers.get("Retry-After")),
        )
    return TerminalError(
        status_code=status_code,
        body_text=response.text if body_read else "",
        response=response,
    )


def classify_exception(exc: Exception) -> NetworkError:
    """Classify an attempt that failed before a response was received.

    Args:
        exc: The transport exception raised by httpx.

    Returns:
        A ``NetworkError`` wrapping ``exc``.
    """
    return NetworkError(cause=exc)
