"""Main application settings and configuration management.

This module composes all the application settings from the different modules
(app, database, auth) into a single, accessible `Settings` class.

It loads settings from environment variables and .env files, validates them,
and provides a single `settings` object for use throughout the application.

Environment Support:
- Development: Uses .env
- Test: Uses .env.test when present
- Staging: Uses .env.staging
- Production: Uses .env.production
"""

import logging
import os
from pathlib import Path

from pydantic_settings import SettingsConfigDict

from .app import AppSettings
from .auth import AuthSettings
from .database import DatabaseSettings

logger = logging.getLogger(__name__)


class Settings(AppSettings, DatabaseSettings, AuthSettings):
    """The main settings class that aggregates all application configurations.

    It inherits from all the specialized settings classes, providing a unified
    interface to all configuration parameters.

    Usage:
        - Access settings via the singleton instance `settings` throughout the application.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    def validate_required_fields(self) -> None:
        """Validates that critical configuration is present outside of tests.

        Raises:
            ValueError: If a production deployment is missing required fields.
        """
        if self.APP_ENV in ("development", "test"):
            return

        missing_fields = []
        if not self.DATABASE_URL.startswith("postgresql"):
            missing_fields.append("DATABASE_URL (postgresql)")
        if not self.SECURE_COOKIES:
            missing_fields.append("SECURE_COOKIES")

        if missing_fields:
            error_msg = f"Invalid {self.APP_ENV} configuration: {', '.join(missing_fields)}"
            logger.error(error_msg)
            raise ValueError(error_msg)
        logger.info("All required environment variables are set.")


def create_settings() -> Settings:
    """Create settings instance with environment-specific configuration.

    Returns:
        Settings: Configured settings instance
    """
    env = os.getenv("APP_ENV", "development")

    env_files = {
        "development": ".env",
        "test": ".env.test",
        "staging": ".env.staging",
        "production": ".env.production",
    }

    env_file = env_files.get(env, ".env")

    if env != "development" and Path(env_file).exists():
        logger.info(f"Loading environment configuration from {env_file}")
        return Settings(_env_file=env_file)
    if Path(".env").exists():
        logger.info(f"Loading environment configuration from .env (environment: {env})")
    else:
        logger.info(f"No .env file found, using environment variables only (environment: {env})")
    return Settings()


# Create a singleton instance of the settings to be used across the application.
settings = create_settings()
settings.validate_required_fields()
