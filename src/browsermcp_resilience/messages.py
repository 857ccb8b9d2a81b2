"""Status messages delivered through the Notifier."""

REMEDIATION_STEPS = (
    "1. The Browser MCP extension is enabled in the browser",
    "2. The browser is running",
    "3. The extension has proper permissions",
)


def _prefixed(prefix: str, text: str) -> str:
    return f"{prefix} {text}" if prefix else text


def reconnecting(attempt: int, max_retries: int, prefix: str = "") -> str:
    return _prefixed(prefix, f"Connection lost. Attempting to reconnect (attempt {attempt}/{max_retries})...")


def reconnected(prefix: str = "") -> str:
    return _prefixed(
        prefix,
        "Successfully reconnected to the upstream service. You can continue with browser automation.",
    )


def reconnect_failed(max_retries: int, prefix: str = "") -> str:
    steps = "\n".join(REMEDIATION_STEPS)
    return _prefixed(
        prefix,
        f"Failed to reconnect after {max_retries} attempts. Please check that:\n{steps}\n\n"
        "You may need to restart the host application if the issue persists.",
    )


def restored(prefix: str = "") -> str:
    return _prefixed(prefix, "Connection restored successfully.")


def still_disconnected(retry_count: int, max_retries: int, prefix: str = "") -> str:
    """Hint shown before a guarded tool runs while the connection is down."""
    return _prefixed(
        prefix,
        f"Connection currently lost ({retry_count}/{max_retries} reconnection attempts used).",
    )


BROWSER_CONTEXT = """## Browser Automation Context

The Browser MCP integration has been used in this session. When resuming:
- Browser state may have changed since last interaction
- Browser tabs opened during automation may still be active
- Consider checking current browser state before making assumptions
- Use Browser MCP tools to verify page state when needed"""
