"""
Database connection settings.
"""
import logging

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class DatabaseSettings(BaseSettings):
    """
    Defines settings for connecting to the session and credential store.

    ``DATABASE_URL`` wins when set (e.g. ``sqlite+aiosqlite:///./authcore.db``
    for local development and tests). Otherwise the URL is assembled from the
    ``POSTGRES_*`` fields for the asyncpg driver.

    Security Note:
        - POSTGRES_PASSWORD must never be logged or committed.
    Performance Note:
        - Tune POSTGRES_POOL_SIZE and POSTGRES_MAX_OVERFLOW to the expected
          request concurrency; they are ignored for SQLite.
    """
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: SecretStr = SecretStr("")
    POSTGRES_DB: str = "authcore"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = Field(ge=1, le=65535, default=5432)
    POSTGRES_POOL_SIZE: int = Field(ge=1, default=10)
    POSTGRES_MAX_OVERFLOW: int = Field(ge=0, default=20)
    POSTGRES_POOL_TIMEOUT: float = Field(ge=1.0, default=5.0)
    DATABASE_URL: str = ""
    DATABASE_ECHO: bool = False

    @model_validator(mode="after")
    def assemble_db_url(self) -> "DatabaseSettings":
        """
        Assembles the database connection URL if not provided explicitly.

        Returns:
            Self with ``DATABASE_URL`` populated.
        """
        if self.DATABASE_URL:
            return self

        password = self.POSTGRES_PASSWORD.get_secret_value()
        if not password:
            logger.warning("POSTGRES_PASSWORD not set during DATABASE_URL assembly.")

        self.DATABASE_URL = (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:"
            f"{password}@{self.POSTGRES_HOST}:"
            f"{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )
        logger.debug("Assembled DATABASE_URL (password masked for security).")
        return self
