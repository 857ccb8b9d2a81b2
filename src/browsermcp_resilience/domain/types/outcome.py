"""Tool outcome types exchanged with the Tool Invoker."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

__all__ = ["ToolOutcome"]


@dataclass(frozen=True)
class ToolOutcome:
    """Result of invoking a remote operation.

    A failed outcome carries an ``error`` payload of arbitrary shape: a plain
    string, a mapping or object with a ``message`` field, or an exception.
    """

    success: bool
    payload: Any = None
    error: Any = None

    @classmethod
    def ok(cls, payload: Any = None) -> ToolOutcome:
        return cls(success=True, payload=payload)

    @classmethod
    def failed(cls, error: Any) -> ToolOutcome:
        return cls(success=False, error=error)

    @classmethod
    def from_tool_output(cls, is_error: bool, content: Any) -> ToolOutcome:
        """
        Build an outcome from a host's raw tool output.

        The output counts as failed when the host flagged it as an error, or
        when its string content mentions "error". Non-string content is
        serialized to JSON so the error text can be classified.

        Args:
            is_error: Whether the host marked the tool result as an error
            content: Tool result content (string or structured)

        Returns:
            ToolOutcome for the output
        """
        mentions_error = isinstance(content, str) and "error" in content
        if not (is_error or mentions_error):
            return cls.ok(content)
        if not content:
            return cls.failed("")
        if isinstance(content, str):
            return cls.failed(content)
        return cls.failed(json.dumps(content, default=str))
