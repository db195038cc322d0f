r"""Callback configuration of the retry executors."""

from __future__ import annotations

__all__ = ["CallbackConfig"]

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from arebound.callbacks import FailureInfo, RequestInfo, ResponseInfo, RetryInfo


@dataclass(frozen=True)
class CallbackConfig:
    """Configuration for callbacks.

    Attributes:
        on_request: Optional callback invoked before each request attempt.
        on_retry: Optional callback invoked before each retry wait.
        on_success: Optional callback invoked when the request succeeds.
        on_failure: Optional callback invoked when a final failure is raised.
    """

    on_request: Callable[[RequestInfo], None] | None = None
    on_retry: Callable[[RetryInfo], None] | None = None
    on_success: Callable[[ResponseInfo], None] | None = None
    on_failure: Callable[[FailureInfo], None] | None = None
