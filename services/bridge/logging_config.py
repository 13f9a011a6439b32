"""
Centralized Logging Configuration for Bridge-Y

Structured logging via structlog on top of the stdlib logging module.
Development gets a colored console renderer, every other environment
gets one JSON object per line.
"""

import logging
import sys
from typing import Any

import structlog


def setup_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """
    Configure logging for the entire application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Use JSON format (production) instead of console output
    """
    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
        force=True,
    )


def get_logger(name: str | None = None) -> Any:
    """
    Get a logger instance.

    Usage:
        from logging_config import get_logger

        logger = get_logger(__name__)
        logger.info("row_inserted", table="shelf_change", id=row_id)
    """
    return structlog.get_logger(name)


def log_error(
    error: Exception,
    context: dict | None = None,
    level: str = "ERROR"
) -> None:
    """Log error with full context and stack trace"""
    logger = get_logger("error_handler")
    log_func = getattr(logger, level.lower(), logger.error)

    log_data = {
        "error_type": type(error).__name__,
        "error_message": str(error),
    }

    if context:
        log_data.update(context)

    log_func("error_occurred", **log_data, exc_info=error)


def http_request_summary(
    method: str,
    path: str,
    status_code: int,
    duration_ms: float
) -> None:
    """Log HTTP request summary"""
    logger = get_logger("http")
    logger.info(
        "http_request",
        method=method,
        path=path,
        status_code=status_code,
        duration_ms=duration_ms
    )
