"""
Logging configuration module for structured logging.

This module configures the application's logging system using structlog.
JSON output is used in production and a human-readable console renderer in
development. Request-scoped fields (request id, client ip) bound through
``structlog.contextvars`` are merged into every event.
"""

import logging

import structlog

from src.core.config.settings import settings


def configure_logging(log_level: str | None = None, json_logs: bool | None = None) -> None:
    """
    Configures the application's logging system.

    Args:
        log_level: Overrides ``settings.LOG_LEVEL``.
        json_logs: Overrides ``settings.LOG_JSON``.
    """
    level = (log_level or settings.LOG_LEVEL).upper()
    use_json = settings.LOG_JSON if json_logs is None else json_logs

    logging.basicConfig(format="%(message)s", level=level)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_log_level,
        structlog.processors.JSONRenderer() if use_json else structlog.dev.ConsoleRenderer(),
    ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


# Create a singleton logger instance for the application
logger = structlog.get_logger()
