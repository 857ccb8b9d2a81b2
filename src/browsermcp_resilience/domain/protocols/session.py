"""Session lifecycle protocol."""

from typing import Any, Protocol, runtime_checkable

__all__ = ["SessionLifecycle"]


@runtime_checkable
class SessionLifecycle(Protocol):
    """Lifecycle signals a Session Host delivers for one session.

    Each signal is delivered exactly once; ``on_session_ended`` always fires
    before the session object is discarded.
    """

    async def on_session_created(self) -> None:
        ...

    async def on_session_idle(self) -> None:
        ...

    async def on_session_error(self, error: Any) -> Any:
        ...

    async def on_session_ended(self) -> None:
        ...
