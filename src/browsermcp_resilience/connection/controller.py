"""Connection controller: detects lost connections and drives recovery."""

from __future__ import annotations

import asyncio
from typing import Any, Optional

from browsermcp_resilience import messages
from browsermcp_resilience.config import ResilienceConfig, RetryPolicy
from browsermcp_resilience.domain.events import (
    ConnectionStatusChanged,
    Event,
    EventBus,
    HealthCheckCompleted,
    ReconnectProgress,
)
from browsermcp_resilience.domain.protocols import Notifier, ToolInvoker
from browsermcp_resilience.domain.types import (
    ConnectionState,
    ConnectionStatus,
    ErrorInfo,
    ReconnectResult,
    StatusSnapshot,
    ToolOutcome,
)
from browsermcp_resilience.logger import get_logger
from browsermcp_resilience.utils import now

from .backoff import ExponentialBackoff
from .classifier import classify_error, extract_error_message
from .health import HealthChecker

logger = get_logger("connection.controller")


class ConnectionController:
    """
    Owns the connection state of one session and orchestrates reconnection.

    The controller:
    - Classifies failed tool outcomes into task errors and connection errors
    - Runs bounded exponential-backoff reconnection cycles that probe the
      upstream through the Tool Invoker
    - Tells the user what is happening through the Notifier
    - Publishes phase changes on an EventBus for observers

    All methods are expected to run on one event loop. At most one
    reconnection cycle is in flight at a time; outcomes recorded while a cycle
    is pending are processed after it finishes.

    A successful probe only ends the cycle (``RECOVERED``). The connection is
    considered restored, and ``retry_count`` reset, only when a real operation
    later succeeds through ``record_outcome``.
    """

    def __init__(
        self,
        invoker: ToolInvoker,
        notifier: Notifier,
        config: Optional[ResilienceConfig] = None,
        session_id: str = "default",
        event_bus: Optional[EventBus] = None,
        backoff: Optional[ExponentialBackoff] = None,
        health_checker: Optional[HealthChecker] = None,
    ):
        """
        Args:
            invoker: Executes the connectivity probe
            notifier: Receives status messages
            config: Resilience options (defaults if None)
            session_id: Identifier of the owning session, used in events and logs
            event_bus: Bus receiving connection events (a private one if None)
            backoff: Backoff strategy (built from the config's retry policy if None)
            health_checker: Periodic checker (built from the config's interval if None)
        """
        self._config = config or ResilienceConfig()
        self._invoker = invoker
        self._notifier = notifier
        self._session_id = session_id
        self.event_bus = event_bus or EventBus()
        self._backoff = backoff or ExponentialBackoff(self._config.retry)
        self._health_checker = health_checker or HealthChecker(self._config.health_check_interval)

        self._state = ConnectionState()
        self._phase = ConnectionStatus.CONNECTED
        self._inflight: Optional[asyncio.Task[ReconnectResult]] = None
        self._stop_event = asyncio.Event()
        self._closed = False
        self._exhaustion_reported = False
        self._upstream_reachable: Optional[bool] = None

    # ------------------------------------------------------------------ #
    # Properties
    # ------------------------------------------------------------------ #

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def policy(self) -> RetryPolicy:
        return self._backoff.policy

    @property
    def phase(self) -> ConnectionStatus:
        return self._phase

    @property
    def is_connected(self) -> bool:
        return self._state.connected

    @property
    def is_reconnecting(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def health_checker(self) -> HealthChecker:
        return self._health_checker

    def status(self) -> StatusSnapshot:
        """Read-only snapshot of the connection state."""
        state = self._state
        return StatusSnapshot(
            connected=state.connected,
            retry_count=state.retry_count,
            last_error=state.last_error,
            phase=self._phase,
            max_retries=self.policy.max_retries,
            reconnecting=self.is_reconnecting,
            last_attempt_timestamp=state.last_attempt_timestamp,
            upstream_reachable=self._upstream_reachable,
        )

    def compute_delay(self, retry_count: int) -> float:
        """Backoff delay (ms) before attempt ``retry_count + 1``."""
        return self._backoff.calculate_delay(retry_count)

    # ------------------------------------------------------------------ #
    # Outcomes
    # ------------------------------------------------------------------ #

    async def record_outcome(self, tool_name: str, outcome: ToolOutcome) -> Optional[ReconnectResult]:
        """
        Feed the outcome of a remote operation into the controller.

        Args:
            tool_name: Name of the operation that ran
            outcome: Its outcome

        Returns:
            The reconnection result when the outcome was a connection error,
            None otherwise (success, task error, or session already ended)
        """
        if self._closed:
            logger.debug(f"[{self._session_id}] Ignoring outcome of {tool_name}: session ended")
            return None

        await self._wait_for_inflight()
        if self._closed:
            return None

        if outcome.success:
            self._mark_connected(tool_name)
            return None

        if not classify_error(outcome.error):
            logger.debug(f"[{self._session_id}] {tool_name} failed with a task error; leaving it to the caller")
            return None

        error = ErrorInfo(
            message=extract_error_message(outcome.error),
            raw=outcome.error,
            tool_name=tool_name,
        )
        self._mark_failed(error)

        if self._backoff.should_retry(self._state.retry_count):
            self._notify(messages.reconnecting(self._state.retry_count + 1, self.policy.max_retries, self._prefix))

        result = await self.reconnect()
        self._report(result)
        return result

    async def record_error(self, error: Any, source: str = "session.error") -> Optional[ReconnectResult]:
        """Record a failure that did not come from a tool outcome."""
        return await self.record_outcome(source, ToolOutcome.failed(error))

    def reset(self) -> None:
        """
        Forget previous reconnection attempts.

        Clears exhaustion so the next connection error starts a fresh series of
        cycles. Connectivity itself is not asserted.
        """
        if self._closed:
            return
        logger.info(f"[{self._session_id}] Retry counter reset (was {self._state.retry_count})")
        self._state.retry_count = 0
        self._exhaustion_reported = False
        if not self._state.connected:
            self._set_phase(ConnectionStatus.RECONNECTING)

    # ------------------------------------------------------------------ #
    # Reconnection
    # ------------------------------------------------------------------ #

    async def reconnect(self) -> ReconnectResult:
        """
        Run one reconnection cycle, or join the one already in flight.

        Emits no notification; callers decide what to tell the user.
        """
        if self._closed:
            return ReconnectResult.ABANDONED

        if self.is_reconnecting:
            logger.debug(f"[{self._session_id}] Reconnection already in progress, joining it")
            return await self._join(self._inflight)

        if self._state.connected:
            logger.warning(f"[{self._session_id}] Reconnect requested while connected; nothing to do")
            return ReconnectResult.RECOVERED

        task = asyncio.create_task(self._run_cycle())
        self._inflight = task
        try:
            return await self._join(task)
        finally:
            if self._inflight is task and task.done():
                self._inflight = None

    async def _run_cycle(self) -> ReconnectResult:
        state = self._state
        max_retries = self._backoff.max_attempts

        if not self._backoff.should_retry(state.retry_count):
            logger.warning(f"[{self._session_id}] Retries exhausted ({state.retry_count}/{max_retries})")
            self._set_phase(ConnectionStatus.EXHAUSTED)
            return ReconnectResult.EXHAUSTED

        delay = self.compute_delay(state.retry_count)
        state.retry_count += 1
        state.last_attempt_timestamp = now()
        attempt = state.retry_count

        logger.info(f"[{self._session_id}] Waiting {delay / 1000:.1f}s before reconnection attempt {attempt}/{max_retries}")
        self._publish(
            ReconnectProgress(
                session_id=self._session_id,
                attempts=attempt,
                max_attempts=max_retries,
                next_retry_delay=delay,
            )
        )

        completed = await self._backoff.wait(delay, self._stop_event)
        if not completed or self._closed:
            logger.info(f"[{self._session_id}] Reconnection attempt {attempt} abandoned")
            return ReconnectResult.ABANDONED

        outcome = await self._probe()
        if self._closed:
            return ReconnectResult.ABANDONED

        if outcome.success or not classify_error(outcome.error):
            self._upstream_reachable = True
            logger.info(f"[{self._session_id}] Probe succeeded on attempt {attempt}/{max_retries}")
            return ReconnectResult.RECOVERED

        self._upstream_reachable = False
        state.last_error = ErrorInfo(
            message=extract_error_message(outcome.error),
            raw=outcome.error,
            tool_name=self._config.probe_tool,
        )
        logger.warning(f"[{self._session_id}] Probe failed on attempt {attempt}/{max_retries}: {state.last_error.message}")

        if self._backoff.should_retry(state.retry_count):
            return ReconnectResult.RETRIES_REMAINING

        self._set_phase(ConnectionStatus.EXHAUSTED)
        return ReconnectResult.EXHAUSTED

    async def _probe(self) -> ToolOutcome:
        """Invoke the probe tool, turning timeouts and exceptions into failed outcomes."""
        tool = self._config.probe_tool
        timeout = self._config.probe_timeout / 1000
        try:
            return await asyncio.wait_for(
                self._invoker.invoke(tool, dict(self._config.probe_arguments)),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            return ToolOutcome.failed(f"Probe {tool} timeout after {timeout:.1f}s")
        except Exception as e:
            logger.debug(f"[{self._session_id}] Probe {tool} raised: {e}")
            return ToolOutcome.failed(e)

    async def _join(self, task: asyncio.Task[ReconnectResult]) -> ReconnectResult:
        await asyncio.wait({task})
        if task.cancelled():
            return ReconnectResult.ABANDONED
        return task.result()

    async def _wait_for_inflight(self) -> None:
        task = self._inflight
        if task is not None and not task.done():
            logger.debug(f"[{self._session_id}] Waiting for in-flight reconnection before handling outcome")
            await asyncio.wait({task})

    # ------------------------------------------------------------------ #
    # Health checks & lifecycle
    # ------------------------------------------------------------------ #

    async def start(self) -> None:
        """Start the periodic health check."""
        if self._closed:
            return
        await self._health_checker.start(self.check_health)

    async def check_health(self) -> Optional[bool]:
        """
        Probe the upstream once if the connection is down and idle.

        Records whether the upstream answered. Never touches ``retry_count``
        or ``connected``; recovery is still confirmed by a real operation.

        Returns:
            Whether the upstream looked reachable, or None if no probe ran
        """
        if self._closed or self._state.connected or self.is_reconnecting:
            return None

        outcome = await self._probe()
        if self._closed:
            return None

        healthy = outcome.success or not classify_error(outcome.error)
        self._upstream_reachable = healthy
        if healthy:
            logger.info(f"[{self._session_id}] Health check: upstream reachable again")
        else:
            logger.debug(f"[{self._session_id}] Health check: upstream still unreachable")
        self._publish(HealthCheckCompleted(session_id=self._session_id, healthy=healthy))
        return healthy

    async def close(self) -> None:
        """
        Tear down: stop the health check and abandon any pending cycle.

        After this returns no state changes and no notifications happen.
        """
        if self._closed:
            return
        self._closed = True
        self._stop_event.set()

        await self._health_checker.stop()

        task = self._inflight
        if task is not None and not task.done():
            logger.info(f"[{self._session_id}] Abandoning in-flight reconnection")
            task.cancel()
            await asyncio.wait({task})
        self._inflight = None
        logger.info(f"[{self._session_id}] Connection controller closed")

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    @property
    def _prefix(self) -> str:
        return self._config.notification_prefix

    def _mark_connected(self, tool_name: str) -> None:
        state = self._state
        if state.connected:
            return

        logger.info(f"[{self._session_id}] {tool_name} succeeded after {state.retry_count} attempt(s); connection restored")
        state.connected = True
        state.retry_count = 0
        state.last_error = None
        self._exhaustion_reported = False
        self._upstream_reachable = None
        self._set_phase(ConnectionStatus.CONNECTED)
        self._notify(messages.restored(self._prefix))

    def _mark_failed(self, error: ErrorInfo) -> None:
        logger.warning(f"[{self._session_id}] Connection error from {error.tool_name}: {error.message}")
        self._state.connected = False
        self._state.last_error = error
        if not self._backoff.should_retry(self._state.retry_count):
            self._set_phase(ConnectionStatus.EXHAUSTED)
        else:
            self._set_phase(ConnectionStatus.RECONNECTING)

    def _report(self, result: ReconnectResult) -> None:
        if result is ReconnectResult.RECOVERED:
            self._notify(messages.reconnected(self._prefix))
        elif result is ReconnectResult.EXHAUSTED and not self._exhaustion_reported:
            self._exhaustion_reported = True
            self._notify(messages.reconnect_failed(self.policy.max_retries, self._prefix))

    def _set_phase(self, phase: ConnectionStatus) -> None:
        if phase is self._phase:
            return
        previous = self._phase
        self._phase = phase
        logger.debug(f"[{self._session_id}] Status changed: {previous.value} -> {phase.value}")
        self._publish(
            ConnectionStatusChanged(
                session_id=self._session_id,
                status=phase,
                previous_status=previous,
            )
        )

    def _notify(self, message: str) -> None:
        if self._closed:
            return
        try:
            self._notifier.notify(message)
        except Exception as e:
            logger.error(f"[{self._session_id}] Notifier failed: {e}")

    def _publish(self, event: Event) -> None:
        if self._closed:
            return
        self.event_bus.publish(event)
