"""Logging configuration for browsermcp-resilience using loguru."""

import os
import sys
from loguru import logger
from typing import Optional

DEFAULT_LOG_FILENAME = "browsermcp-resilience.log"

LOG_FILE_ENV = "BROWSERMCP_RESILIENCE_LOG_FILE"

# Store the configured log file path to ensure consistency
_log_file_path: Optional[str] = None


def setup_logger(
    log_file: Optional[str] = None,
    log_level: str = "INFO",
    rotation: str = "10 MB",
    retention: str = "7 days",
    compression: str = "zip",
    console_output: bool = False,
) -> None:
    """
    Configure loguru logger with file and console output.

    Replaces every sink already registered on the process-wide logger, so
    only the command-line entry point calls it. Hosts embedding the hooks
    keep their own sinks and see records bound with an ``extra["name"]``.

    Args:
        log_file: Path to the log file (if None, uses the previously configured path,
            the BROWSERMCP_RESILIENCE_LOG_FILE environment variable, or the default)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        rotation: Log rotation size
        retention: How long to keep old logs
        compression: Compression format for old logs
        console_output: Whether to output to console
    """
    global _log_file_path

    if log_file is None:
        if _log_file_path is None:
            _log_file_path = os.environ.get(LOG_FILE_ENV) or os.path.join(os.getcwd(), DEFAULT_LOG_FILENAME)
        log_file = _log_file_path
    else:
        if not os.path.isabs(log_file):
            log_file = os.path.join(os.getcwd(), log_file)
        _log_file_path = log_file

    # Remove default handler
    logger.remove()
    # Records logged through the bare logger still need {extra[name]}
    logger.configure(extra={"name": "browsermcp_resilience"})

    if console_output:
        logger.add(
            sys.stderr,
            level=log_level,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{extra[name]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
            colorize=True,
        )

    logger.add(
        log_file,
        level=log_level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[name]}:{function}:{line} - {message}",
        rotation=rotation,
        retention=retention,
        compression=compression,
        encoding="utf-8",
    )


def get_logger(name: Optional[str] = None):
    """
    Get a configured logger instance.

    Args:
        name: Optional name for the logger

    Returns:
        Logger instance
    """
    return logger.bind(name=name or "browsermcp_resilience")
