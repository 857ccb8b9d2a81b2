"""Synchronous publish/subscribe bus for connection events.

Handlers run inline, in subscription order, on the publisher's event loop.
They MUST be plain functions: a controller publishes from inside its
reconnection cycle and cannot await observers. Observers that need async
work should schedule it with ``asyncio.create_task()``.
"""

import inspect
from typing import Callable, Type, TypeVar

from browsermcp_resilience.logger import get_logger

from .types import Event

logger = get_logger("events.bus")

T = TypeVar("T", bound=Event)

EventHandler = Callable[[Event], None]


class EventBus:
    """Routes published events to the handlers subscribed for their type.

    Example:
        ```python
        bus = EventBus()

        def on_change(event: ConnectionStatusChanged):
            print(f"{event.session_id}: {event.status.value}")

        bus.subscribe(ConnectionStatusChanged, on_change)
        bus.publish(ConnectionStatusChanged(
            session_id="ses_1",
            status=ConnectionStatus.RECONNECTING,
        ))
        ```

    Not thread-safe; all calls are expected on one event loop.
    """

    def __init__(self):
        self._handlers: dict[Type[Event], list[EventHandler]] = {}

    def subscribe(self, event_type: Type[T], handler: Callable[[T], None]) -> None:
        """
        Register a handler for one event type.

        Subscribing the same handler twice is a no-op.

        Raises:
            TypeError: If handler is a coroutine function
        """
        if inspect.iscoroutinefunction(handler):
            raise TypeError(
                f"Event handler {handler.__name__} must be synchronous; "
                f"schedule async work with asyncio.create_task() instead."
            )

        handlers = self._handlers.setdefault(event_type, [])
        if handler in handlers:
            logger.debug(f"Handler already subscribed for {event_type.__name__}")
            return
        handlers.append(handler)  # type: ignore[arg-type]
        logger.debug(f"Subscribed handler for {event_type.__name__}")

    def unsubscribe(self, event_type: Type[T], handler: Callable[[T], None]) -> None:
        """Remove a handler; unknown handlers are ignored."""
        handlers = self._handlers.get(event_type)
        if handlers and handler in handlers:
            handlers.remove(handler)  # type: ignore[arg-type]
            logger.debug(f"Unsubscribed handler for {event_type.__name__}")

    def publish(self, event: Event) -> None:
        """
        Deliver an event to every handler subscribed for its exact type.

        A failing handler is logged and skipped; the remaining handlers still run.
        """
        event_type = type(event)
        handlers = list(self._handlers.get(event_type, []))
        if not handlers:
            return

        logger.debug(f"Publishing {event_type.__name__} to {len(handlers)} handler(s)")
        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.opt(exception=e).error(f"Error in event handler for {event_type.__name__}: {e}")

    def clear(self) -> None:
        """Drop all subscriptions."""
        self._handlers.clear()

    def has_subscribers(self, event_type: Type[Event]) -> bool:
        return bool(self._handlers.get(event_type))
