"""Ready-made Notifier implementations."""

from __future__ import annotations

from dataclasses import dataclass, field

from browsermcp_resilience.logger import get_logger

logger = get_logger("notifiers")


@dataclass
class TranscriptNotifier:
    """Collects status messages as transcript entries for the host to append.

    Hosts that inject messages into the conversation drain the pending entries
    after each hook call.
    """

    role: str = "assistant"
    messages: list[dict[str, str]] = field(default_factory=list)

    def notify(self, message: str) -> None:
        self.messages.append({"role": self.role, "content": message})

    def drain(self) -> list[dict[str, str]]:
        """Return and forget the pending entries."""
        pending, self.messages = self.messages, []
        return pending


class LoggingNotifier:
    """Writes status messages to the log only."""

    def __init__(self, level: str = "INFO"):
        self._level = level

    def notify(self, message: str) -> None:
        logger.log(self._level, message)
