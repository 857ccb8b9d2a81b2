"""Event types for the event bus system.

Controllers publish these so observers (status lines, metrics, tests) can
follow connection changes without being wired into the controller.
"""

import time
from dataclasses import dataclass, field

from browsermcp_resilience.domain.types import ConnectionStatus


@dataclass
class Event:
    """Base class for all events.

    The timestamp field is automatically set when the event is created.
    """

    timestamp: float = field(default_factory=time.time, init=False)
    """Timestamp when the event was created (Unix timestamp)."""


@dataclass
class ConnectionStatusChanged(Event):
    """Event published when a session's connection phase changes.

    Attributes:
        session_id: Session owning the connection
        status: New connection phase
        previous_status: Previous connection phase
    """

    session_id: str
    status: ConnectionStatus
    previous_status: ConnectionStatus | None = None


@dataclass
class ReconnectProgress(Event):
    """Event published when a reconnection cycle starts waiting.

    Attributes:
        session_id: Session being reconnected
        attempts: Reconnection attempt number (1-based)
        max_attempts: Maximum number of reconnection attempts
        next_retry_delay: Milliseconds until the probe runs
    """

    session_id: str
    attempts: int
    max_attempts: int
    next_retry_delay: float


@dataclass
class HealthCheckCompleted(Event):
    """Event published after a periodic health check probed the upstream."""

    session_id: str
    healthy: bool
