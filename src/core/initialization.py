"""Application initialization and setup.

This module handles the initialization tasks required before the application starts.
Environment variables and ``.env`` files are read by pydantic-settings when
``src.core.config.settings`` is imported.
"""

from src.core.config.settings import settings
from src.core.logging import configure_logging


def initialize_application() -> None:
    """Initialize the application with all necessary setup tasks.

    Currently this configures structlog from ``LOG_LEVEL`` and ``LOG_JSON``.
    """
    configure_logging(log_level=settings.LOG_LEVEL, json_logs=settings.LOG_JSON)
