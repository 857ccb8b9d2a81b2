"""Tool invoker protocol."""

from typing import Any, Protocol

from browsermcp_resilience.domain.types import ToolOutcome

__all__ = ["ToolInvoker"]


class ToolInvoker(Protocol):
    """Protocol for executing a named remote operation.

    Implementations should report failures through the returned outcome. The
    controller also tolerates invokers that raise: the exception text becomes
    the failure payload.
    """

    async def invoke(self, tool_name: str, arguments: dict[str, Any] | None = None) -> ToolOutcome:
        """Invoke a remote operation.

        Args:
            tool_name: Name of the operation to invoke
            arguments: Optional dictionary of arguments for the operation

        Returns:
            ToolOutcome describing success or failure
        """
        ...
