r"""Retry-After header parsing utilities.

This module parses the value of the ``Retry-After`` header sent with
rate-limited (HTTP 429) responses, as described in RFC 9110.
"""

from __future__ import annotations

__all__ = ["parse_retry_after"]

import logging
import math
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

logger: logging.Logger = logging.getLogger(__name__)


def _parse_delay_seconds(value: str) -> float | None:
    try:
        seconds = float(value)
    except ValueError:
        return None
    if not math.isfinite(seconds) or seconds < 0:
        return None
    return seconds


def parse_retry_after(retry_after_header: str | None) -> float | None:
    """Parse the Retry-After header value of an HTTP response.

    The header comes in two forms:
    1. A number of seconds to wait (e.g., "120")
    2. An HTTP-date (e.g., "Wed, 21 Oct 2015 07:28:00 GMT")

    Both are converted to a number of seconds to wait. ``None`` tells the
    caller to fall back on its own backoff computation.

    Args:
        retry_after_header: The raw header value, or ``None`` if the
            response does not carry the header.

    Returns:
        The number of seconds to wait, or ``None`` if the header is absent
        or cannot be parsed. HTTP-dates in the past give ``0.0``.

    Example:
        ```pycon
        >>> from arebound.utils import parse_retry_after
        >>> parse_retry_after("2")
        2.0
        >>> parse_retry_after("0")
        0.0
        >>> parse_retry_after(None) is None
        True
        >>> parse_retry_after("soon") is None
        True
        >>> parse_retry_after("Wed, 21 Oct 2015 07:28:00 GMT")
        0.0

        ```
    """
    if retry_after_header is None:
        return None
    value = retry_after_header.strip()
    if not value:
        return None

    seconds = _parse_delay_seconds(value)
    if seconds is not None:
        return seconds

    try:
        retry_date: datetime = parsedate_to_datetime(value)
    except (ValueError, TypeError, OverflowError):
        logger.debug(f"Failed to parse Retry-After header: {retry_after_header!r}")
        return None
    if retry_date.tzinfo is None:
        # RFC 5322 dates without zone information are taken as UTC
        retry_date = retry_date.replace(tzinfo=timezone.utc)
    delta_seconds = (retry_date - datetime.now(timezone.utc)).total_seconds()
    return max(0.0, delta_seconds)
