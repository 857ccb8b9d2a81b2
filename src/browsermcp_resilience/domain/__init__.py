"""Domain layer - connection abstractions with no host dependencies.

This layer contains:
- protocols: Interfaces for the Tool Invoker, Notifier and Session Host
- types: Shared domain types (ConnectionState, ToolOutcome, ReconnectResult, etc.)
- events: Domain events and event bus
- exceptions: Domain-specific exceptions
"""
