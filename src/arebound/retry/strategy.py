r"""Retry strategy for calculating the wait before the next attempt."""

from __future__ import annotations

__all__ = ["RetryStrategy"]

import logging
import random
from typing import TYPE_CHECKING

from arebound.backoff import ExponentialBackoff
from arebound.retry.outcome import NetworkError, RateLimited

if TYPE_CHECKING:
    from arebound.backoff import BaseBackoffStrategy
    from arebound.config import ResilienceConfig

logger: logging.Logger = logging.getLogger(__name__)


class RetryStrategy:
    """Strategy for calculating waits between attempts.

    The wait depends on why the attempt failed:
    - ``NetworkError``: ``backoff.calculate(attempt)``, no jitter
    - ``RateLimited`` with a Retry-After value: exactly that value
    - ``RateLimited`` without: ``backoff.calculate(attempt)`` plus
      ``random.uniform(0, max_jitter)`` so that callers rate-limited at
      the same moment do not all come back at the same moment

    Any wait is then capped at ``max_wait_time`` when set.

    Args:
        backoff_strategy: Backoff strategy instance.
        max_jitter: Upper bound in seconds of the rate-limit jitter.
        max_wait_time: Optional maximum wait time cap in seconds.

    Example:
        ```pycon
        >>> from arebound.backoff import ExponentialBackoff
        >>> from arebound.retry import RetryStrategy
        >>> from arebound.retry.outcome import RateLimited
        >>> strategy = RetryStrategy(ExponentialBackoff(base_delay=1.0), max_jitter=0.0)
        >>> strategy.calculate_delay(2, RateLimited(status_code=429, retry_after=None))
        4.0
        >>> strategy.calculate_delay(2, RateLimited(status_code=429, retry_after=7.0))
        7.0

        ```
    """

    def __init__(
        self,
        backoff_strategy: BaseBackoffStrategy,
        max_jitter: float,
        max_wait_time: float | None = None,
    ) -> None:
        self.backoff_strategy = backoff_strategy
        self.max_jitter = max_jitter
        self.max_wait_time = max_wait_time

    @classmethod
    def from_config(cls, config: ResilienceConfig) -> RetryStrategy:
        """Create the strategy described by a resilience configuration.

        Args:
            config: The resilience configuration.

        Returns:
            The retry strategy.
        """
        backoff_strategy = config.backoff_strategy
        if backoff_strategy is None:
            backoff_strategy = ExponentialBackoff(base_delay=config.base_delay)
        return cls(
            backoff_strategy=backoff_strategy,
            max_jitter=config.max_jitter,
            max_wait_time=config.max_wait_time,
        )

    def calculate_delay(self, attempt: int, outcome: NetworkError | RateLimited) -> float:
        """Calculate the wait after a retryable attempt.

        Args:
            attempt: The attempt that just failed (0-indexed).
            outcome: The classification of that attempt.

        Returns:
            The wait in seconds.
        """
        if isinstance(outcome, RateLimited) and outcome.retry_after is not None:
            wait_time = outcome.retry_after
            logger.debug(f"Using Retry-After header value: {wait_time:.2f}s")
        else:
            wait_time = self.backoff_strategy.calculate(attempt)
            if isinstance(outcome, RateLimited) and self.max_jitter > 0:
                jitter = random.uniform(0, self.max_jitter)  # noqa: S311
                logger.debug(f"Adding {jitter:.2f}s of jitter to {wait_time:.2f}s backoff")
                wait_time += jitter

        if self.max_wait_time is not None and wait_time > self.max_wait_time:
            logger.debug(
                f"Capping wait time from {wait_time:.2f}s to {self.max_wait_time:.2f}s"
            )
            wait_time = self.max_wait_time
        return wait_time
