"""Connection-related domain types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from browsermcp_resilience.utils import now

__all__ = [
    "ConnectionStatus",
    "ReconnectResult",
    "ErrorInfo",
    "ConnectionState",
    "StatusSnapshot",
]


class ConnectionStatus(Enum):
    """Phase of the upstream connection as seen by the controller.

    There is no standing "disconnected but idle" phase: every detected
    disconnect immediately starts a reconnection cycle, so a lost connection
    is either RECONNECTING or EXHAUSTED.
    """

    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    EXHAUSTED = "exhausted"


class ReconnectResult(Enum):
    """Outcome of a single reconnection cycle."""

    RECOVERED = "recovered"
    RETRIES_REMAINING = "retries_remaining"
    EXHAUSTED = "exhausted"
    ABANDONED = "abandoned"
    """The owning session ended while the cycle was in flight."""


@dataclass(frozen=True)
class ErrorInfo:
    """A classified connection failure."""

    message: str
    """Textual message extracted from the error payload."""
    raw: Any = None
    """The error payload as it was received."""
    tool_name: Optional[str] = None
    """Name of the operation that produced the error."""
    timestamp: float = field(default_factory=now)


@dataclass
class ConnectionState:
    """Mutable connection record, owned by exactly one ConnectionController."""

    connected: bool = True
    retry_count: int = 0
    last_error: Optional[ErrorInfo] = None
    last_attempt_timestamp: Optional[float] = None


@dataclass(frozen=True)
class StatusSnapshot:
    """Read-only view of the connection state."""

    connected: bool
    retry_count: int
    last_error: Optional[ErrorInfo]
    phase: ConnectionStatus
    max_retries: int
    reconnecting: bool = False
    last_attempt_timestamp: Optional[float] = None
    upstream_reachable: Optional[bool] = None
    """Whether the latest probe (reconnection cycle or health check) reached the
    upstream. None until one runs while disconnected."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "connected": self.connected,
            "retry_count": self.retry_count,
            "last_error": self.last_error.message if self.last_error else None,
            "phase": self.phase.value,
            "max_retries": self.max_retries,
            "reconnecting": self.reconnecting,
            "last_attempt_timestamp": self.last_attempt_timestamp,
            "upstream_reachable": self.upstream_reachable,
        }
