"""
Logging Configuration

Structured logging setup using structlog for consistent, parseable logs.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor

from config.settings import settings

SERVICE_NAME = "tenement-sync"


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Add application context to all log entries.
    """
    event_dict["service"] = SERVICE_NAME
    event_dict["environment"] = settings.environment
    return event_dict


def setup_logging(
    log_format: Optional[str] = None,
    log_level: Optional[str] = None,
) -> structlog.BoundLogger:
    """
    Configure structured logging for the application.

    Args:
        log_format: Override settings.log_format ("json" or "console")
        log_level: Override settings.log_level

    Returns:
        Configured structlog logger instance
    """
    log_format = log_format or settings.log_format
    log_level = (log_level or settings.log_level).upper()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level, logging.INFO),
    )

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
    ]

    if log_format == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.processors.ExceptionRenderer())
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger()


def get_logger(name: str = None) -> structlog.BoundLogger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    if name:
        return structlog.get_logger(name)
    return structlog.get_logger()


def log_context(**context: Any):
    """
    Bind context to every log entry emitted inside a ``with`` block.

    Used by sync runs so upserter and scraper events carry the jurisdiction.

    Args:
        **context: Key/value pairs to bind (e.g. jurisdiction="WA")

    Returns:
        Context manager from structlog.contextvars
    """
    return structlog.contextvars.bound_contextvars(**context)
