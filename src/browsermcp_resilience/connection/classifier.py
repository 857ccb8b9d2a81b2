"""Connection-error classification.

A case-insensitive substring match over the error text. Any marker hit counts
as a lost connection.
"""

from collections.abc import Mapping
from typing import Any

CONNECTION_ERROR_MARKERS: tuple[str, ...] = (
    "connection",
    "econnrefused",
    "enotfound",
    "timeout",
    "network",
    "disconnected",
    "unavailable",
)


def extract_error_message(error: Any) -> str:
    """
    Pull the textual message out of an error payload.

    Strings are used as-is. Structured errors contribute their ``message``
    field (mapping key or attribute); exceptions without one contribute their
    string form. Anything else yields an empty string.
    """
    if error is None:
        return ""
    if isinstance(error, str):
        return error
    if isinstance(error, Mapping):
        message = error.get("message")
        return message if isinstance(message, str) else ""

    message = getattr(error, "message", None)
    if isinstance(message, str):
        return message
    if isinstance(error, BaseException):
        return str(error) or type(error).__name__
    return ""


def classify_error(error: Any) -> bool:
    """Return True when the error payload looks like a lost connection."""
    text = extract_error_message(error).lower()
    if not text:
        return False
    return any(marker in text for marker in CONNECTION_ERROR_MARKERS)
