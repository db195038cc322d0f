r"""Default values and the resilience configuration of the executor.

The defaults reproduce the retry helper this package grew out of: five
retries after the first attempt, a one second base delay doubled on each
attempt, and up to one second of jitter on rate-limit waits.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_BASE_DELAY",
    "DEFAULT_MAX_JITTER",
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_TIMEOUT",
    "RATE_LIMIT_STATUS_CODE",
    "ResilienceConfig",
]

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from arebound.utils.validation import validate_resilience_params

if TYPE_CHECKING:
    from arebound.backoff import BaseBackoffStrategy

# Default timeout in seconds of a single attempt (connect, read, write, pool)
DEFAULT_TIMEOUT = 10.0

# Default maximum number of retry attempts
# Total attempts = max_retries + 1 (initial attempt)
DEFAULT_MAX_RETRIES = 5

# Default base delay in seconds of the exponential backoff
# Wait time = base_delay * (2 ** attempt)
# With 1.0: 1st retry waits 1s, 2nd waits 2s, 3rd waits 4s, ...
DEFAULT_BASE_DELAY = 1.0

# Default upper bound in seconds of the jitter added to rate-limit waits
DEFAULT_MAX_JITTER = 1.0

# 429: Too Many Requests, the only status code that is retried
RATE_LIMIT_STATUS_CODE = 429


@dataclass(frozen=True)
class ResilienceConfig:
    """Resilience policy of one executor invocation.

    Args:
        max_retries: Maximum number of retry attempts after the first one.
            Must be >= 0.
        base_delay: Base delay in seconds of the exponential backoff.
            Must be > 0.
        max_jitter: Upper bound in seconds of the uniform random jitter added
            to rate-limit waits that are not driven by a Retry-After header.
            Must be >= 0.
        max_wait_time: Optional cap in seconds on any single wait, including
            waits requested by a Retry-After header. Must be > 0 if provided.
        backoff_strategy: Optional backoff strategy replacing the default
            ``ExponentialBackoff(base_delay)``.

    Example:
        ```pycon
        >>> from arebound.config import ResilienceConfig
        >>> config = ResilienceConfig()
        >>> config.max_retries, config.base_delay
        (5, 1.0)
        >>> config.max_attempts
        6
        >>> config.merge(max_retries=2, max_wait_time=None).max_retries
        2

        ```
    """

    max_retries: int = DEFAULT_MAX_RETRIES
    base_delay: float = DEFAULT_BASE_DELAY
    max_jitter: float = DEFAULT_MAX_JITTER
    max_wait_time: float | None = None
    backoff_strategy: BaseBackoffStrategy | None = None

    def __post_init__(self) -> None:
        validate_resilience_params(
            max_retries=self.max_retries,
            base_delay=self.base_delay,
            max_jitter=self.max_jitter,
            max_wait_time=self.max_wait_time,
        )

    @property
    def max_attempts(self) -> int:
        """The total number of attempts, ``max_retries + 1``."""
        return self.max_retries + 1

    def merge(self, **overrides: Any) -> ResilienceConfig:
        """Create a new config with some parameters overridden.

        Only non-None override values are applied, so per-call keyword
        arguments left to ``None`` keep the values of this config.

        Args:
            **overrides: Keyword arguments for parameters to override.

        Returns:
            A new validated ``ResilienceConfig``.
        """
        filtered_overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **filtered_overrides)
