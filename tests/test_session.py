"""Tests for SessionHooks and ResiliencePlugin."""

import asyncio

import pytest

from browsermcp_resilience import messages
from browsermcp_resilience.config import ResilienceConfig, RetryPolicy
from browsermcp_resilience.domain.events import ConnectionStatusChanged
from browsermcp_resilience.domain.exceptions import SessionClosedError, UnknownSessionError
from browsermcp_resilience.domain.protocols import SessionLifecycle
from browsermcp_resilience.domain.types import ConnectionStatus, ReconnectResult, ToolOutcome
from browsermcp_resilience.notifiers import TranscriptNotifier
from browsermcp_resilience.session import ResiliencePlugin

from tests.fakes import ScriptedInvoker


@pytest.fixture
def fast_config() -> ResilienceConfig:
    return ResilienceConfig(
        retry=RetryPolicy(max_retries=2, initial_delay=1, max_delay=5),
        notification_prefix="[Browser MCP]",
    )


@pytest.fixture
def plugin(fast_config):
    invokers: dict[str, ScriptedInvoker] = {}
    notifiers: dict[str, TranscriptNotifier] = {}

    def make_invoker(session_id):
        return invokers.setdefault(session_id, ScriptedInvoker())

    def make_notifier(session_id):
        return notifiers.setdefault(session_id, TranscriptNotifier())

    plugin = ResiliencePlugin(make_invoker, make_notifier, config=fast_config)
    plugin.invokers = invokers
    plugin.notifiers = notifiers
    return plugin


class TestSessionHooks:
    """Tests for per-session hooks."""

    @pytest.mark.asyncio
    async def test_created_starts_health_check(self, plugin):
        hooks = await plugin.session_created("ses_1")

        assert isinstance(hooks, SessionLifecycle)
        assert hooks.controller.health_checker.is_running
        await plugin.shutdown()
        assert not hooks.controller.health_checker.is_running

    @pytest.mark.asyncio
    async def test_unguarded_tools_are_ignored(self, plugin):
        hooks = await plugin.session_created("ses_1")

        result = await hooks.after_tool("bash", True, "network unreachable")

        assert result is None
        assert hooks.controller.is_connected
        assert hooks.before_tool("bash") is None
        await plugin.shutdown()

    @pytest.mark.asyncio
    async def test_after_tool_connection_error(self, plugin):
        hooks = await plugin.session_created("ses_1")
        plugin.invokers["ses_1"].outcomes = [ToolOutcome.failed("ECONNREFUSED")]

        result = await hooks.after_tool("browsermcp_navigate", True, "Error: ENOTFOUND browser")

        assert result == ReconnectResult.RETRIES_REMAINING
        assert plugin.notifiers["ses_1"].drain() == [
            {
                "role": "assistant",
                "content": "[Browser MCP] Connection lost. Attempting to reconnect (attempt 1/2)...",
            }
        ]
        assert hooks.before_tool("browsermcp_click") == messages.still_disconnected(1, 2, "[Browser MCP]")
        await plugin.shutdown()

    @pytest.mark.asyncio
    async def test_after_tool_success_restores(self, plugin):
        hooks = await plugin.session_created("ses_1")
        await hooks.after_tool("browsermcp_navigate", True, "connection timeout")
        plugin.notifiers["ses_1"].drain()

        result = await hooks.after_tool("browsermcp_navigate", False, "Navigated")

        assert result is None
        assert hooks.controller.is_connected
        assert [m["content"] for m in plugin.notifiers["ses_1"].drain()] == [
            "[Browser MCP] Connection restored successfully."
        ]
        await plugin.shutdown()

    @pytest.mark.asyncio
    async def test_task_error_not_masked(self, plugin):
        hooks = await plugin.session_created("ses_1")

        result = await hooks.after_tool("browsermcp_click", True, "error: element not found")

        assert result is None
        assert hooks.controller.is_connected
        assert plugin.notifiers["ses_1"].drain() == []
        await plugin.shutdown()

    @pytest.mark.asyncio
    async def test_session_error_routes_connection_errors(self, plugin):
        hooks = await plugin.session_created("ses_1")

        assert await plugin.session_error("ses_1", {"message": "quota exceeded"}) is None
        assert hooks.controller.is_connected

        result = await plugin.session_error("ses_1", {"message": "Browser disconnected"})
        assert result == ReconnectResult.RECOVERED
        assert hooks.controller.status().last_error.tool_name == "session.error"
        await plugin.shutdown()

    @pytest.mark.asyncio
    async def test_session_idle_changes_nothing(self, plugin):
        hooks = await plugin.session_created("ses_1")

        await plugin.session_idle("ses_1")

        assert hooks.controller.status().phase == ConnectionStatus.CONNECTED
        await plugin.shutdown()

    @pytest.mark.asyncio
    async def test_compaction_context(self, plugin):
        hooks = await plugin.session_created("ses_1")
        transcript = [
            {"role": "user", "content": "open example.com"},
            {"role": "assistant", "content": [{"type": "tool_use", "name": "browsermcp_navigate"}]},
        ]

        assert hooks.compaction_context(transcript) == messages.BROWSER_CONTEXT
        assert hooks.compaction_context([{"content": [{"type": "tool_use", "name": "bash"}]}]) is None
        assert hooks.compaction_context(None) is None
        await plugin.shutdown()


class TestResiliencePlugin:
    """Tests for the per-session registry."""

    @pytest.mark.asyncio
    async def test_sessions_are_isolated(self, plugin):
        first = await plugin.session_created("ses_1")
        second = await plugin.session_created("ses_2")

        await first.after_tool("browsermcp_click", True, "network error")

        assert not first.controller.is_connected
        assert second.controller.is_connected
        assert first.controller.policy is second.controller.policy
        await plugin.shutdown()

    @pytest.mark.asyncio
    async def test_created_twice_returns_same_hooks(self, plugin):
        hooks = await plugin.session_created("ses_1")

        assert await plugin.session_created("ses_1") is hooks
        await plugin.shutdown()

    @pytest.mark.asyncio
    async def test_unknown_and_ended_sessions(self, plugin):
        with pytest.raises(UnknownSessionError):
            plugin.status("ses_missing")

        await plugin.session_created("ses_1")
        await plugin.session_ended("ses_1")

        with pytest.raises(SessionClosedError):
            await plugin.after_tool("ses_1", "browsermcp_click", False, "ok")
        assert "ses_1" not in plugin.sessions

    @pytest.mark.asyncio
    async def test_ended_history_is_bounded(self, plugin):
        plugin.ended_history_size = 2
        for session_id in ("ses_1", "ses_2", "ses_3"):
            await plugin.session_created(session_id)
            await plugin.session_ended(session_id)

        with pytest.raises(UnknownSessionError):
            plugin.status("ses_1")
        with pytest.raises(SessionClosedError):
            plugin.status("ses_2")
        with pytest.raises(SessionClosedError):
            plugin.status("ses_3")

    @pytest.mark.asyncio
    async def test_session_end_mid_cycle(self):
        """Ending a session during a backoff wait silences the controller."""
        config = ResilienceConfig(retry=RetryPolicy(initial_delay=5000, max_delay=5000))
        notifier = TranscriptNotifier()
        invoker = ScriptedInvoker()
        plugin = ResiliencePlugin(lambda _: invoker, lambda _: notifier, config=config)
        hooks = await plugin.session_created("ses_1")

        pending = asyncio.create_task(hooks.after_tool("browsermcp_click", True, "connection lost"))
        while not hooks.controller.is_reconnecting:
            await asyncio.sleep(0)
        sent = notifier.drain()

        await plugin.session_ended("ses_1")

        assert await pending == ReconnectResult.ABANDONED
        assert notifier.drain() == []
        assert invoker.calls == []
        assert len(sent) == 1

    @pytest.mark.asyncio
    async def test_events_carry_session_id(self, plugin):
        changes = []
        plugin.event_bus.subscribe(ConnectionStatusChanged, changes.append)
        hooks = await plugin.session_created("ses_7")

        await hooks.after_tool("browsermcp_click", True, "timeout")

        assert changes[0].session_id == "ses_7"
        assert changes[0].status == ConnectionStatus.RECONNECTING
        await plugin.shutdown()
