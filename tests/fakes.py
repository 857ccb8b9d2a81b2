"""Fakes standing in for the Tool Invoker and Notifier in tests."""

import asyncio
from typing import Any, Optional

from browsermcp_resilience.config import RetryPolicy
from browsermcp_resilience.connection import ExponentialBackoff
from browsermcp_resilience.domain.types import ToolOutcome


class ScriptedInvoker:
    """Tool invoker returning canned outcomes in order.

    Entries may be ToolOutcome instances or exceptions to raise. Once the
    script runs out, every call succeeds.
    """

    def __init__(self, outcomes: Optional[list[Any]] = None):
        self.outcomes = list(outcomes or [])
        self.calls: list[tuple[str, dict[str, Any] | None]] = []

    async def invoke(self, tool_name: str, arguments: dict[str, Any] | None = None) -> ToolOutcome:
        self.calls.append((tool_name, arguments))
        if not self.outcomes:
            return ToolOutcome.ok("probe ok")
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class RecordingNotifier:
    """Notifier keeping every message."""

    def __init__(self):
        self.messages: list[str] = []

    def notify(self, message: str) -> None:
        self.messages.append(message)


class InstantBackoff(ExponentialBackoff):
    """Backoff that records requested delays instead of sleeping.

    When ``gate`` is set, waits block until the gate opens or the stop event
    fires, which lets tests end a session mid-wait.
    """

    def __init__(self, policy: RetryPolicy, gate: Optional[asyncio.Event] = None):
        super().__init__(policy)
        self.delays: list[float] = []
        self.gate = gate
        self.waiting = asyncio.Event()

    async def wait(self, delay, stop_event) -> bool:
        self.delays.append(delay)
        self.waiting.set()
        if self.gate is not None:
            gate_task = asyncio.ensure_future(self.gate.wait())
            stop_task = asyncio.ensure_future(stop_event.wait())
            try:
                await asyncio.wait({gate_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)
            finally:
                gate_task.cancel()
                stop_task.cancel()
        return not stop_event.is_set()


