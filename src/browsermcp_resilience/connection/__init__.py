"""Connection resilience components: classification, backoff, health checks."""

from .backoff import ExponentialBackoff, compute_delay
from .classifier import CONNECTION_ERROR_MARKERS, classify_error, extract_error_message
from .controller import ConnectionController
from .health import HealthChecker

__all__ = [
    "CONNECTION_ERROR_MARKERS",
    "ConnectionController",
    "ExponentialBackoff",
    "HealthChecker",
    "classify_error",
    "compute_delay",
    "extract_error_message",
]
