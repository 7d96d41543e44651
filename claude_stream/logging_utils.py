"""
Centralized logging and error handling utilities for claude-stream.

This module standardizes logging and error reporting across the codebase.
Standard output is reserved for completion tokens, so every log record is
routed to standard error.

Features:
- Structured logging with contextual information
- Error classification into exit codes and categories
- Operation timing
"""

from __future__ import annotations

import logging
import sys
import time
from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from claude_stream.llm.exceptions import (
    ConfigurationError,
    ProtocolError,
    StreamingError,
    TransportError,
)

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(colors=False),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

EXIT_FAILURE = 1

logger = structlog.get_logger(__name__)


def configure_logging(level: str = "WARNING") -> None:
    """Route stdlib (and therefore structlog) records to stderr at `level`."""
    numeric_level = logging.getLevelName(str(level).upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level '{level}'")

    logging.basicConfig(
        level=numeric_level,
        format="%(message)s",
        stream=sys.stderr,
        force=True,
    )


class StreamErrorHandler:
    """Centralized error classification with structured logging."""

    @staticmethod
    def classify_error(error: Exception) -> tuple[int, str]:
        """
        Classify an error and return the process exit code and category.

        Args:
            error: The exception to classify

        Returns:
            Tuple of (exit_code, error_category)
        """
        if isinstance(error, ConfigurationError):
            return EXIT_FAILURE, "configuration_error"
        if isinstance(error, ProtocolError | ValidationError):
            return EXIT_FAILURE, "protocol_error"
        if isinstance(error, StreamingError):
            return EXIT_FAILURE, "stream_error"
        if isinstance(error, TimeoutError | httpx.TimeoutException):
            return EXIT_FAILURE, "timeout_error"
        if isinstance(error, TransportError | httpx.HTTPError | OSError):
            return EXIT_FAILURE, "transport_error"
        return EXIT_FAILURE, "unknown_error"

    @staticmethod
    def report(error: Exception, operation: str) -> int:
        """Return the exit code for a fatal error; the category is logged at debug."""
        exit_code, error_category = StreamErrorHandler.classify_error(error)
        logger.debug(
            "Fatal error classified",
            operation=operation,
            error_type=type(error).__name__,
            error_category=error_category,
            error_step=getattr(error, "step", None),
            error_message=str(error),
        )
        return exit_code


@asynccontextmanager
async def operation_context(
    operation: str,
    *,
    context: dict[str, Any] | None = None,
    log_timing: bool = True,
):
    """
    Async context manager for operation logging.

    Args:
        operation: Description of the operation
        context: Additional context for logging
        log_timing: Whether to log operation timing

    Yields:
        Bound logger for the operation
    """
    operation_logger = logger.bind(
        operation=operation,
        **(context or {}),
    )

    operation_logger.info("Operation started")
    start_time = time.perf_counter() if log_timing else None

    try:
        yield operation_logger

        log_data: dict[str, Any] = {}
        if log_timing and start_time is not None:
            duration = round((time.perf_counter() - start_time) * 1000, 2)
            log_data["duration_ms"] = duration

        operation_logger.info("Operation completed successfully", **log_data)

    except Exception as e:
        error_log_data: dict[str, Any] = {
            "error_type": type(e).__name__,
            "error_message": str(e),
        }
        if log_timing and start_time is not None:
            duration = round((time.perf_counter() - start_time) * 1000, 2)
            error_log_data["duration_ms"] = duration

        operation_logger.error("Operation failed", **error_log_data)
        raise
