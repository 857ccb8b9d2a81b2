"""Exponential backoff for reconnection cycles."""

import asyncio

from browsermcp_resilience.config import RetryPolicy
from browsermcp_resilience.logger import get_logger

logger = get_logger("connection.backoff")


def compute_delay(policy: RetryPolicy, retry_count: int) -> float:
    """
    Delay in milliseconds before reconnection attempt ``retry_count + 1``.

    ``min(initial_delay * backoff_multiplier ** retry_count, max_delay)``,
    saturating at ``max_delay`` for arbitrarily large counts.

    Raises:
        ValueError: If retry_count is negative
    """
    if retry_count < 0:
        raise ValueError(f"retry_count must be >= 0, got {retry_count}")
    try:
        delay = policy.initial_delay * (policy.backoff_multiplier ** retry_count)
    except OverflowError:
        return policy.max_delay
    return min(delay, policy.max_delay)


class ExponentialBackoff:
    """Computes delays from a RetryPolicy and waits them out cancellably."""

    def __init__(self, policy: RetryPolicy):
        self._policy = policy

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    @property
    def max_attempts(self) -> int:
        return self._policy.max_retries

    def calculate_delay(self, retry_count: int) -> float:
        return compute_delay(self._policy, retry_count)

    def should_retry(self, retry_count: int) -> bool:
        """Whether another attempt is allowed after ``retry_count`` attempts."""
        return retry_count < self._policy.max_retries

    async def wait(self, delay: float, stop_event: asyncio.Event) -> bool:
        """
        Sleep for ``delay`` milliseconds without blocking the event loop.

        Args:
            delay: Time to wait (ms)
            stop_event: Ends the wait early when set

        Returns:
            True if the full delay elapsed, False if stop_event interrupted it
        """
        if stop_event.is_set():
            logger.info("Stop event set before reconnection delay")
            return False

        try:
            await asyncio.wait_for(stop_event.wait(), timeout=delay / 1000)
        except asyncio.TimeoutError:
            return True

        logger.info("Stop event set during reconnection delay")
        return False
