"""
Utility functions for browsermcp-resilience.
"""

import time
from datetime import datetime


def now() -> float:
    """Current Unix timestamp."""
    return time.time()


def format_time_hhmmss(timestamp: float | None) -> str:
    """
    Format a Unix timestamp as HH:MM:ss.

    Args:
        timestamp: Unix timestamp (float) or None

    Returns:
        Formatted string like "14:30:45" or "--:--:--" if there is no timestamp
    """
    if not timestamp:
        return "--:--:--"

    dt = datetime.fromtimestamp(timestamp)
    return dt.strftime("%H:%M:%S")
