r"""Exceptions raised by the resilient request executor.

Retryable conditions (transport failures and rate limiting) never escape
the executor as such: they are absorbed and retried, and only surface as
``ExhaustedRetriesError`` once the retry budget is spent.
"""

from __future__ import annotations

__all__ = [
    "ExhaustedRetriesError",
    "RequestCancelledError",
    "ResilientRequestError",
    "ResponseDecodeError",
    "TerminalRequestError",
]

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx


class ResilientRequestError(RuntimeError):
    """Base class of the final failures raised by the executor.

    Args:
        method: The HTTP method of the failed request.
        url: The URL of the failed request.
        message: A human-readable description of the failure.
        attempts: The number of attempts made before failing.
    """

    def __init__(self, method: str, url: str, message: str, attempts: int = 1) -> None:
        super().__init__(message)
        self.method = method
        self.url = url
        self.attempts = attempts


class TerminalRequestError(ResilientRequestError):
    r"""Raised when the server answers with a non-retryable status.

    Every non-2xx status except 429 is an application-level error (bad
    request, authentication failure, server error, ...) and is raised on
    first occurrence, without consuming retry budget.

    Args:
        method: The HTTP method of the failed request.
        url: The URL of the failed request.
        status_code: The HTTP status code of the response.
        body_text: The response body decoded as text, empty if it could not
            be read.
        attempts: The number of attempts made, including this one.
        response: The HTTP response, when available.

    Example:
        ```pycon
        >>> from arebound.exceptions import TerminalRequestError
        >>> error = TerminalRequestError(
        ...     method="POST",
        ...     url="https://api.example.com/v1/checkouts",
        ...     status_code=401,
        ...     body_text='{"message": "Unauthorized"}',
        ... )
        >>> str(error)
        'POST request to https://api.example.com/v1/checkouts failed with status 401: {"message": "Unauthorized"}'
        >>> error.status_code
        401

        ```
    """

    def __init__(
        self,
        method: str,
        url: str,
        status_code: int,
        body_text: str,
        attempts: int = 1,
        response: httpx.Response | None = None,
    ) -> None:
        message = f"{method} request to {url} failed with status {status_code}"
        if body_text:
            message = f"{message}: {body_text}"
        super().__init__(method=method, url=url, message=message, attempts=attempts)
        self.status_code = status_code
        self.body_text = body_text
        self.response = response


class ExhaustedRetriesError(ResilientRequestError):
    r"""Raised when the retry budget is spent without a success.

    The underlying transport error, if the last attempt failed at the
    network level, is chained as ``__cause__``.

    Args:
        method: The HTTP method of the failed request.
        url: The URL of the failed request.
        attempts: The number of attempts made (``max_retries + 1``).
        reason: Why the last attempt failed, ``"rate_limited"`` or
            ``"network_error"``.
        status_code: The HTTP status code of the last response, if any.

    Example:
        ```pycon
        >>> from arebound.exceptions import ExhaustedRetriesError
        >>> error = ExhaustedRetriesError(
        ...     method="GET",
        ...     url="https://api.example.com/data",
        ...     attempts=6,
        ...     reason="rate_limited",
        ...     status_code=429,
        ... )
        >>> str(error)
        'GET request to https://api.example.com/data failed after 6 attempts (rate_limited, status 429)'

        ```
    """

    def __init__(
        self,
        method: str,
        url: str,
        attempts: int,
        reason: str,
        status_code: int | None = None,
    ) -> None:
        details = reason if status_code is None else f"{reason}, status {status_code}"
        super().__init__(
            method=method,
            url=url,
            message=f"{method} request to {url} failed after {attempts} attempts ({details})",
            attempts=attempts,
        )
        self.reason = reason
        self.status_code = status_code


class ResponseDecodeError(ResilientRequestError):
    """Raised when a successful response body cannot be decoded.

    Either its content encoding is broken or it is not valid JSON. The
    decoding error is chained as ``__cause__``.

    Args:
        method: The HTTP method of the request.
        url: The URL of the request.
        status_code: The (2xx) HTTP status code of the response.
        attempts: The number of attempts made.
    """

    def __init__(self, method: str, url: str, status_code: int, attempts: int = 1) -> None:
        super().__init__(
            method=method,
            url=url,
            message=f"{method} request to {url} returned status {status_code} with an undecodable body",
            attempts=attempts,
        )
        self.status_code = status_code


class RequestCancelledError(ResilientRequestError):
    """Raised when the caller's cancel event is set during an
    invocation."""

    def __init__(self, method: str, url: str, attempts: int) -> None:
        super().__init__(
            method=method,
            url=url,
            message=f"{method} request to {url} was cancelled after {attempts} attempts",
            attempts=attempts,
        )
