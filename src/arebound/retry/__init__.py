r"""Retry package: outcome classification, wait strategy and executors.

Public API:
    - CallbackConfig: Configuration for callbacks
    - RetryStrategy: Strategy for calculating waits between attempts
    - RequestExecutor: Synchronous request executor
    - AsyncRequestExecutor: Asynchronous request executor
    - classify_response / classify_exception: Attempt classification
"""

from __future__ import annotations

__all__ = [
    "AsyncRequestExecutor",
    "AttemptOutcome",
    "CallbackConfig",
    "NetworkError",
    "RateLimited",
    "RequestExecutor",
    "RetryStrategy",
    "Success",
    "TerminalError",
    "classify_exception",
    "classify_response",
]

from arebound.retry.config import CallbackConfig
from arebound.retry.executor import RequestExecutor
from arebound.retry.executor_async import AsyncRequestExecutor
from arebound.retry.outcome import (
    AttemptOutcome,
    NetworkError,
    RateLimited,
    Success,
    TerminalError,
    classify_exception,
    classify_response,
)
from arebound.retry.strategy import RetryStrategy
