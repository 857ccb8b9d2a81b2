"""Tests for ToolOutcome construction and the MCP tool invoker."""

import json

import pytest
from mcp.types import CallToolResult, TextContent

from browsermcp_resilience.domain.types import ToolOutcome
from browsermcp_resilience.invokers import MCPToolInvoker, outcome_from_call_result


def text_result(text: str, is_error: bool = False) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=is_error)


class FakeSession:
    """Stand-in for an MCP ClientSession."""

    def __init__(self, result=None, error: Exception | None = None):
        self.result = result
        self.error = error
        self.calls = []

    async def call_tool(self, name, arguments):
        self.calls.append((name, arguments))
        if self.error:
            raise self.error
        return self.result


class TestToolOutcomeFromToolOutput:
    """Tests for ToolOutcome.from_tool_output."""

    def test_plain_success(self):
        outcome = ToolOutcome.from_tool_output(False, "Navigated to https://example.com")

        assert outcome.success is True
        assert outcome.payload == "Navigated to https://example.com"

    def test_flagged_error(self):
        outcome = ToolOutcome.from_tool_output(True, "ECONNREFUSED 127.0.0.1:9009")

        assert outcome.success is False
        assert outcome.error == "ECONNREFUSED 127.0.0.1:9009"

    def test_string_mentioning_error(self):
        outcome = ToolOutcome.from_tool_output(False, "error: WebSocket connection closed")

        assert outcome.success is False

    def test_structured_content_is_serialized(self):
        content = [{"type": "text", "text": "Network unavailable"}]

        outcome = ToolOutcome.from_tool_output(True, content)

        assert outcome.success is False
        assert outcome.error == json.dumps(content)

    def test_flagged_error_without_content(self):
        outcome = ToolOutcome.from_tool_output(True, None)

        assert outcome.success is False
        assert outcome.error == ""


class TestOutcomeFromCallResult:
    """Tests for outcome_from_call_result."""

    def test_success(self):
        result = text_result("snapshot")

        outcome = outcome_from_call_result(result)

        assert outcome.success is True
        assert outcome.payload is result

    def test_error_text(self):
        outcome = outcome_from_call_result(text_result("No connection to browser extension", is_error=True))

        assert outcome.success is False
        assert outcome.error == "No connection to browser extension"

    def test_missing_result(self):
        outcome = outcome_from_call_result(None)

        assert outcome.success is False
        assert "unavailable" in outcome.error


class TestMCPToolInvoker:
    """Tests for MCPToolInvoker."""

    @pytest.mark.asyncio
    async def test_strips_host_prefix(self):
        session = FakeSession(result=text_result("ok"))
        invoker = MCPToolInvoker(lambda: session, strip_prefix="browsermcp_")

        outcome = await invoker.invoke("browsermcp_browser_snapshot")

        assert outcome.success is True
        assert session.calls == [("browser_snapshot", {})]

    @pytest.mark.asyncio
    async def test_no_session(self):
        invoker = MCPToolInvoker(lambda: None)

        outcome = await invoker.invoke("browser_snapshot", {"a": 1})

        assert outcome.success is False
        assert "disconnected" in outcome.error

    @pytest.mark.asyncio
    async def test_exception_becomes_failed_outcome(self):
        error = ConnectionError("Connection closed")
        invoker = MCPToolInvoker(lambda: FakeSession(error=error))

        outcome = await invoker.invoke("browser_click", {"ref": "s1e2"})

        assert outcome.success is False
        assert outcome.error is error
