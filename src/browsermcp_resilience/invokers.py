"""Tool invoker backed by an MCP client session."""

from __future__ import annotations

from typing import Any, Callable, Optional

from mcp.client.session import ClientSession
from mcp.types import CallToolResult, TextContent

from browsermcp_resilience.domain.types import ToolOutcome
from browsermcp_resilience.logger import get_logger

logger = get_logger("invokers.mcp")

SessionGetter = Callable[[], Optional[ClientSession]]


def outcome_from_call_result(result: Optional[CallToolResult]) -> ToolOutcome:
    """
    Convert an MCP tool result into a ToolOutcome.

    Error results carry their text content joined as the error message.
    """
    if result is None:
        return ToolOutcome.failed("No result returned: connection unavailable")

    texts = [item.text for item in result.content if isinstance(item, TextContent)]
    if result.isError:
        return ToolOutcome.failed("\n".join(texts) or "Tool call failed")
    return ToolOutcome.ok(result)


class MCPToolInvoker:
    """Invokes tools on whichever MCP session is current.

    Example:
        >>> invoker = MCPToolInvoker(lambda: session, strip_prefix="browsermcp_")
        >>> outcome = await invoker.invoke("browsermcp_browser_snapshot")
    """

    def __init__(self, session_getter: SessionGetter, strip_prefix: str = ""):
        """
        Args:
            session_getter: Returns the active session, or None while disconnected
            strip_prefix: Host-side prefix removed before calling the server
        """
        self._session_getter = session_getter
        self._strip_prefix = strip_prefix

    def server_tool_name(self, tool_name: str) -> str:
        """Name of the tool as the MCP server knows it."""
        if self._strip_prefix and tool_name.startswith(self._strip_prefix):
            return tool_name[len(self._strip_prefix):]
        return tool_name

    async def invoke(self, tool_name: str, arguments: dict[str, Any] | None = None) -> ToolOutcome:
        session = self._session_getter()
        if session is None:
            logger.warning(f"Cannot call tool '{tool_name}': no active MCP session")
            return ToolOutcome.failed("MCP session disconnected")

        name = self.server_tool_name(tool_name)
        try:
            result = await session.call_tool(name, arguments or {})
        except Exception as e:
            logger.error(f"Failed to call tool '{name}': {e}")
            return ToolOutcome.failed(e)

        return outcome_from_call_result(result)
