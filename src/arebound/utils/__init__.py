r"""Utility functions for the resilient request executor.

This package provides helpers for parameter validation, Retry-After
header parsing, cancellable waits and structured logging.
"""

from __future__ import annotations

__all__ = [
    "parse_retry_after",
    "validate_resilience_params",
    "validate_timeout",
    "validate_url",
    "wait",
    "wait_async",
]

from arebound.utils.retry_after import parse_retry_after
from arebound.utils.sleep import wait, wait_async
from arebound.utils.validation import validate_resilience_params, validate_timeout, validate_url
