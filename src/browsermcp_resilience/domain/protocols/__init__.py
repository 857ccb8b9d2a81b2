"""Domain protocols - interfaces for the collaborators around the controller.

The controller never depends on a concrete host: the Tool Invoker, the
Notifier and the Session Host are described structurally so any
implementation (an MCP session, a plugin host, test fakes) can be plugged in.
"""

from browsermcp_resilience.domain.protocols.notifier import Notifier
from browsermcp_resilience.domain.protocols.session import SessionLifecycle
from browsermcp_resilience.domain.protocols.tool_invoker import ToolInvoker

__all__ = [
    "Notifier",
    "SessionLifecycle",
    "ToolInvoker",
]
