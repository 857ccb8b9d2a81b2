"""Domain-specific exceptions."""

__all__ = ["ResilienceError", "SessionClosedError", "UnknownSessionError"]


class ResilienceError(Exception):
    """Base class for errors raised by browsermcp-resilience."""


class UnknownSessionError(ResilienceError):
    """A lifecycle or tool hook targeted a session that was never created."""

    def __init__(self, session_id: str):
        super().__init__(f"Unknown session: {session_id}")
        self.session_id = session_id


class SessionClosedError(ResilienceError):
    """A hook targeted a session that has already ended."""

    def __init__(self, session_id: str):
        super().__init__(f"Session already ended: {session_id}")
        self.session_id = session_id
