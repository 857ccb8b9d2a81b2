"""Domain types shared across the package."""

from browsermcp_resilience.domain.types.connection import (
    ConnectionState,
    ConnectionStatus,
    ErrorInfo,
    ReconnectResult,
    StatusSnapshot,
)
from browsermcp_resilience.domain.types.outcome import ToolOutcome

__all__ = [
    "ConnectionState",
    "ConnectionStatus",
    "ErrorInfo",
    "ReconnectResult",
    "StatusSnapshot",
    "ToolOutcome",
]
