r"""Backoff strategies for retry delays."""

from __future__ import annotations

__all__ = ["BaseBackoffStrategy", "ExponentialBackoff"]

from arebound.backoff.base import BaseBackoffStrategy
from arebound.backoff.exponential import ExponentialBackoff
