r"""arebound - Resilient HTTP request executor.

This package performs outbound HTTP calls, typically to third-party
payment or integration APIs, and retries them when it is safe to do so.
Built on top of httpx, it separates what happened on each attempt from
what to do about it.

Key Features:
    - Retries transport failures (connection refused, DNS failure, timeouts)
      with exponential backoff
    - Retries HTTP 429 responses, honouring the Retry-After header (seconds
      or HTTP-date) and otherwise adding random jitter to the backoff
    - Fails immediately on any other non-2xx status, with the response body
    - Returns the JSON body of the first 2xx response
    - Sync and async flavours with identical policy
    - Lifecycle callbacks, structured logging and cancellation support

Example:
    ```pycon
    >>> from arebound import RequestDescriptor, ResilienceConfig, execute
    >>> descriptor = RequestDescriptor.json(
    ...     "https://sandbox.example.com/v1/checkouts",
    ...     {"amount": 1800, "currency": "USD"},
    ...     headers={"Authorization": "Bearer <token>"},
    ... )
    >>> checkout = execute(descriptor, ResilienceConfig(max_retries=5))  # doctest: +SKIP

    ```
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_BASE_DELAY",
    "DEFAULT_MAX_JITTER",
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_TIMEOUT",
    "AsyncResilientClient",
    "ExhaustedRetriesError",
    "RequestCancelledError",
    "RequestDescriptor",
    "ResilienceConfig",
    "ResilientClient",
    "ResilientRequestError",
    "ResponseDecodeError",
    "TerminalRequestError",
    "__version__",
    "execute",
    "execute_async",
]

from importlib.metadata import PackageNotFoundError, version

from arebound.client import ResilientClient
from arebound.client_async import AsyncResilientClient
from arebound.config import (
    DEFAULT_BASE_DELAY,
    DEFAULT_MAX_JITTER,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT,
    ResilienceConfig,
)
from arebound.descriptor import RequestDescriptor
from arebound.exceptions import (
    ExhaustedRetriesError,
    RequestCancelledError,
    ResilientRequestError,
    ResponseDecodeError,
    TerminalRequestError,
)
from arebound.execute import execute
from arebound.execute_async import execute_async

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # pragma: no cover
    # Package is not installed, fallback if needed
    __version__ = "0.0.0"
