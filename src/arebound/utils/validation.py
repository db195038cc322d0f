r"""Parameter validation utilities for the request executor.

This module provides validation functions for resilience parameters,
transport timeouts and target URLs so that configuration mistakes are
reported before any request is sent.
"""

from __future__ import annotations

__all__ = ["validate_resilience_params", "validate_timeout", "validate_url"]

from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from collections.abc import Sequence

SUPPORTED_SCHEMES: Sequence[str] = ("http", "https")


def validate_resilience_params(
    max_retries: int,
    base_delay: float,
    max_jitter: float = 0.0,
    max_wait_time: float | None = None,
) -> None:
    """Validate resilience parameters.

    Args:
        max_retries: Maximum number of retry attempts after the first one.
            Must be >= 0. A value of 0 means a single attempt.
        base_delay: Base delay in seconds of the exponential backoff.
            Must be > 0.
        max_jitter: Upper bound in seconds of the random jitter added to
            rate-limit waits. Must be >= 0.
        max_wait_time: Optional cap in seconds on any single wait.
            Must be > 0 if provided.

    Raises:
        ValueError: If ``max_retries`` or ``max_jitter`` are negative, or if
            ``base_delay`` or ``max_wait_time`` are non-positive.

    Example:
        ```pycon
        >>> from arebound.utils import validate_resilience_params
        >>> validate_resilience_params(max_retries=5, base_delay=1.0)
        >>> validate_resilience_params(max_retries=0, base_delay=0.5, max_jitter=0.0)
        >>> validate_resilience_params(max_retries=-1, base_delay=1.0)  # doctest: +SKIP

        ```
    """
    if max_retries < 0:
        msg = f"max_retries must be >= 0, got {max_retries}"
        raise ValueError(msg)
    if base_delay <= 0:
        msg = f"base_delay must be > 0, got {base_delay}"
        raise ValueError(msg)
    if max_jitter < 0:
        msg = f"max_jitter must be >= 0, got {max_jitter}"
        raise ValueError(msg)
    if max_wait_time is not None and max_wait_time <= 0:
        msg = f"max_wait_time must be > 0, got {max_wait_time}"
        raise ValueError(msg)


def validate_timeout(timeout: float | httpx.Timeout | None) -> None:
    """Validate the per-attempt transport timeout.

    Args:
        timeout: Maximum seconds to wait for the server response.
            Must be > 0 if provided as a numeric value.

    Raises:
        ValueError: If ``timeout`` is a numeric value <= 0.

    Example:
        ```pycon
        >>> from arebound.utils import validate_timeout
        >>> validate_timeout(10.0)
        >>> validate_timeout(None)

        ```
    """
    if isinstance(timeout, (int, float)) and timeout <= 0:
        msg = f"timeout must be > 0, got {timeout}"
        raise ValueError(msg)


def validate_url(url: str) -> None:
    """Validate that ``url`` is an absolute http(s) URL.

    Args:
        url: The target URL.

    Raises:
        ValueError: If the URL cannot be parsed, is relative, uses an
            unsupported scheme or has no host.

    Example:
        ```pycon
        >>> from arebound.utils import validate_url
        >>> validate_url("https://api.example.com/v1/checkouts")
        >>> validate_url("/v1/checkouts")  # doctest: +SKIP
        Traceback (most recent call last):
        ...
        ValueError: url must be an absolute http(s) URL, got '/v1/checkouts'

        ```
    """
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as exc:
        msg = f"url must be an absolute http(s) URL, got {url!r}"
        raise ValueError(msg) from exc
    if not parsed.is_absolute_url or parsed.scheme not in SUPPORTED_SCHEMES or not parsed.host:
        msg = f"url must be an absolute http(s) URL, got {url!r}"
        raise ValueError(msg)
