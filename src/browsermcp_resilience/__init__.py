"""Connection resilience for Browser MCP tool calls.

Detects lost connections from tool outcomes, reconnects with bounded
exponential backoff and reports status to the session.
"""

from browsermcp_resilience.config import ResilienceConfig, RetryPolicy, load_config
from browsermcp_resilience.connection import ConnectionController, classify_error, compute_delay
from browsermcp_resilience.domain.types import (
    ConnectionStatus,
    ReconnectResult,
    StatusSnapshot,
    ToolOutcome,
)
from browsermcp_resilience.session import ResiliencePlugin, SessionHooks

__version__ = "0.1.0"

__all__ = [
    "ConnectionController",
    "ConnectionStatus",
    "ReconnectResult",
    "ResilienceConfig",
    "ResiliencePlugin",
    "RetryPolicy",
    "SessionHooks",
    "StatusSnapshot",
    "ToolOutcome",
    "classify_error",
    "compute_delay",
    "load_config",
]
