"""Host-facing hooks binding sessions to connection controllers.

A plugin host calls these methods from its lifecycle and tool hooks. Each
session gets its own ConnectionController; the retry policy is shared.
"""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Callable, Iterable, Optional

from browsermcp_resilience import messages
from browsermcp_resilience.config import ResilienceConfig
from browsermcp_resilience.connection import ConnectionController, classify_error
from browsermcp_resilience.domain.events import EventBus
from browsermcp_resilience.domain.exceptions import SessionClosedError, UnknownSessionError
from browsermcp_resilience.domain.protocols import Notifier, ToolInvoker
from browsermcp_resilience.domain.types import ReconnectResult, StatusSnapshot, ToolOutcome
from browsermcp_resilience.logger import get_logger

logger = get_logger("session")

InvokerFactory = Callable[[str], ToolInvoker]
NotifierFactory = Callable[[str], Notifier]


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


class SessionHooks:
    """Lifecycle and tool hooks for a single session."""

    def __init__(self, controller: ConnectionController, config: Optional[ResilienceConfig] = None):
        self.controller = controller
        self._config = config or ResilienceConfig()

    async def on_session_created(self) -> None:
        logger.info(f"[{self.controller.session_id}] Session created, ready for browser automation")
        await self.controller.start()

    async def on_session_idle(self) -> None:
        logger.debug(f"[{self.controller.session_id}] Session idle")

    async def on_session_error(self, error: Any) -> Optional[ReconnectResult]:
        """Route host-reported session errors that look like a lost connection."""
        if not classify_error(error):
            return None
        return await self.controller.record_error(error)

    async def on_session_ended(self) -> None:
        await self.controller.close()

    def before_tool(self, tool_name: str) -> Optional[str]:
        """
        Status hint to show before a guarded tool runs while disconnected.

        Returns:
            The hint text, or None when the tool is not guarded or all is well
        """
        if not self._config.is_guarded_tool(tool_name) or self.controller.is_connected:
            return None
        snapshot = self.controller.status()
        return messages.still_disconnected(
            snapshot.retry_count, snapshot.max_retries, self._config.notification_prefix
        )

    async def after_tool(self, tool_name: str, is_error: bool, content: Any) -> Optional[ReconnectResult]:
        """
        Feed a finished tool call into the controller.

        Args:
            tool_name: Name of the tool as registered with the host
            is_error: Whether the host flagged the result as an error
            content: Result content (string or structured)
        """
        if not self._config.is_guarded_tool(tool_name):
            return None
        outcome = ToolOutcome.from_tool_output(is_error, content)
        return await self.controller.record_outcome(tool_name, outcome)

    def compaction_context(self, transcript: Iterable[Any] | None) -> Optional[str]:
        """
        Context to preserve when the host compacts the session transcript.

        Args:
            transcript: Messages whose ``content`` is a list of parts; parts of
                type "tool_use" carry the tool ``name``

        Returns:
            The browser automation context block if a guarded tool was used
        """
        for message in transcript or ():
            for part in _field(message, "content") or ():
                if isinstance(part, str):
                    continue
                name = _field(part, "name")
                if _field(part, "type") == "tool_use" and isinstance(name, str) and self._config.is_guarded_tool(name):
                    return messages.BROWSER_CONTEXT
        return None


class ResiliencePlugin:
    """
    Tracks one SessionHooks per host session.

    Responsibilities:
    - Create a controller when a session starts
    - Dispatch lifecycle and tool hooks to the right session
    - Drop the controller once the session has ended
    """

    # Ended ids remembered to tell SessionClosedError from UnknownSessionError
    ended_history_size = 1024

    def __init__(
        self,
        invoker_factory: InvokerFactory,
        notifier_factory: NotifierFactory,
        config: Optional[ResilienceConfig] = None,
        event_bus: Optional[EventBus] = None,
    ):
        """
        Args:
            invoker_factory: Builds the Tool Invoker used for probes, per session id
            notifier_factory: Builds the Notifier for a session id
            config: Resilience options shared by all sessions
            event_bus: Bus receiving every session's connection events
        """
        self._config = config or ResilienceConfig()
        self._invoker_factory = invoker_factory
        self._notifier_factory = notifier_factory
        self.event_bus = event_bus or EventBus()
        self._sessions: dict[str, SessionHooks] = {}
        self._ended: OrderedDict[str, None] = OrderedDict()

    @property
    def config(self) -> ResilienceConfig:
        return self._config

    @property
    def sessions(self) -> Mapping[str, SessionHooks]:
        return MappingProxyType(self._sessions)

    def hooks(self, session_id: str) -> SessionHooks:
        """
        Hooks of a live session.

        Raises:
            SessionClosedError: If the session already ended
            UnknownSessionError: If the session was never created
        """
        hooks = self._sessions.get(session_id)
        if hooks is not None:
            return hooks
        if session_id in self._ended:
            raise SessionClosedError(session_id)
        raise UnknownSessionError(session_id)

    async def session_created(self, session_id: str) -> SessionHooks:
        if session_id in self._sessions:
            logger.warning(f"Session {session_id} already created")
            return self._sessions[session_id]

        controller = ConnectionController(
            invoker=self._invoker_factory(session_id),
            notifier=self._notifier_factory(session_id),
            config=self._config,
            session_id=session_id,
            event_bus=self.event_bus,
        )
        hooks = SessionHooks(controller, self._config)
        self._sessions[session_id] = hooks
        self._ended.pop(session_id, None)
        await hooks.on_session_created()
        return hooks

    async def session_idle(self, session_id: str) -> None:
        await self.hooks(session_id).on_session_idle()

    async def session_error(self, session_id: str, error: Any) -> Optional[ReconnectResult]:
        return await self.hooks(session_id).on_session_error(error)

    async def session_ended(self, session_id: str) -> None:
        hooks = self._sessions.pop(session_id, None)
        if hooks is None:
            logger.debug(f"Session {session_id} ended but was not tracked")
            return
        self._ended[session_id] = None
        while len(self._ended) > self.ended_history_size:
            self._ended.popitem(last=False)
        await hooks.on_session_ended()

    def before_tool(self, session_id: str, tool_name: str) -> Optional[str]:
        return self.hooks(session_id).before_tool(tool_name)

    async def after_tool(
        self, session_id: str, tool_name: str, is_error: bool, content: Any
    ) -> Optional[ReconnectResult]:
        return await self.hooks(session_id).after_tool(tool_name, is_error, content)

    def status(self, session_id: str) -> StatusSnapshot:
        return self.hooks(session_id).controller.status()

    async def shutdown(self) -> None:
        """End every live session."""
        for session_id in list(self._sessions):
            await self.session_ended(session_id)
