"""Notifier protocol."""

from typing import Protocol

__all__ = ["Notifier"]


class Notifier(Protocol):
    """Surfaces human-readable status text to the user or session transcript."""

    def notify(self, message: str) -> None:
        """Deliver a status message."""
        ...
