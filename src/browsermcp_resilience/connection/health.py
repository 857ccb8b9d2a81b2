"""Periodic health checks while the upstream is unreachable."""

import asyncio
from typing import Awaitable, Callable, Optional

from browsermcp_resilience.logger import get_logger

logger = get_logger("connection.health")


class HealthChecker:
    """Runs a check coroutine on a fixed interval until stopped.

    The checker owns its background task and must be stopped explicitly;
    nothing relies on garbage collection to end the timer. The check itself
    decides whether to probe (typically only while disconnected) and must not
    touch the retry bookkeeping of the reconnection cycle.
    """

    def __init__(self, check_interval: float = 30000):
        """
        Args:
            check_interval: Milliseconds between two checks
        """
        self._check_interval = check_interval
        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None

    @property
    def check_interval(self) -> float:
        return self._check_interval

    @property
    def is_running(self) -> bool:
        """Check if health checker is running."""
        return self._task is not None and not self._task.done()

    async def start(self, check: Callable[[], Awaitable[Optional[bool]]]) -> None:
        """
        Start the periodic timer.

        Args:
            check: Coroutine function run on every tick
        """
        if self.is_running:
            logger.warning("Health checker already running")
            return

        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._loop(check, self._stop_event))
        logger.info(f"Health checker started (interval={self._check_interval / 1000:.1f}s)")

    async def stop(self) -> None:
        """Stop the timer and wait for its task to finish."""
        if not self._task:
            return

        logger.info("Stopping health checker")
        if self._stop_event:
            self._stop_event.set()
        if not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.error(f"Error stopping health checker: {e}")

        self._task = None
        self._stop_event = None
        logger.info("Health checker stopped")

    async def _loop(
        self,
        check: Callable[[], Awaitable[Optional[bool]]],
        stop_event: asyncio.Event,
    ) -> None:
        try:
            while not stop_event.is_set():
                try:
                    await asyncio.wait_for(stop_event.wait(), timeout=self._check_interval / 1000)
                    break
                except asyncio.TimeoutError:
                    pass

                try:
                    await check()
                except Exception as e:
                    logger.error(f"Health check error: {e}")
        except asyncio.CancelledError:
            logger.debug("Health check loop cancelled")
            raise
