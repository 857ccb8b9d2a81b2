"""Event system for observing connection changes.

Example:
    ```python
    from browsermcp_resilience.domain.events import EventBus, ConnectionStatusChanged

    bus = EventBus()
    bus.subscribe(ConnectionStatusChanged, lambda e: print(e.status.value))
    ```
"""

from .bus import EventBus
from .types import (
    ConnectionStatusChanged,
    Event,
    HealthCheckCompleted,
    ReconnectProgress,
)

__all__ = [
    "EventBus",
    "Event",
    "ConnectionStatusChanged",
    "HealthCheckCompleted",
    "ReconnectProgress",
]
