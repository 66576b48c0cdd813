"""Main application entry point for the FastAPI application.

This module serves as the central entry point for the application.
It initializes the application and creates the FastAPI instance using
the application factory pattern. ``run`` serves it with uvicorn and is
installed as the ``authcore`` console script.
"""

import uvicorn

from src.core.application import create_application
from src.core.config.settings import settings
from src.core.initialization import initialize_application

# Initialize the application
initialize_application()

# Create the FastAPI application
app = create_application()


def run() -> None:
    """Serve ``src.main:app`` on ``API_HOST``:``API_PORT``; reloads when ``DEBUG`` is on."""
    uvicorn.run(
        "src.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
        # structlog owns log formatting
        log_config=None,
    )


if __name__ == "__main__":
    run()
