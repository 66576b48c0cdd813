"""Authentication and authorization settings.
"""

import logging

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class AuthSettings(BaseSettings):
    """Defines settings for sessions, password hashing and OAuth providers.

    Security Note:
        - OAuth client secrets should never be exposed in logs or version control.
        - OAUTH_TOKEN_ENCRYPTION_KEY is a Fernet key. When it is empty, provider
          access tokens are not cached at all.
        - SECURE_COOKIES must be enabled behind HTTPS in production.
    """

    # Bearer sessions
    SESSION_TTL_WEB_DAYS: int = Field(ge=1, default=7)
    SESSION_TTL_MOBILE_DAYS: int = Field(ge=1, default=30)
    SESSION_SWEEP_INTERVAL_SECONDS: int = Field(ge=0, default=3600)  # 0 disables the sweep

    # Browser sessions (signed cookie)
    BROWSER_SESSION_COOKIE: str = "authcore_session"
    BROWSER_SESSION_MAX_AGE_SECONDS: int = Field(ge=60, default=7 * 24 * 3600)
    SECURE_COOKIES: bool = False

    # Password hashing
    BCRYPT_WORK_FACTOR: int = Field(ge=4, le=31, default=12)

    # OAuth settings
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: SecretStr = SecretStr("")
    GITHUB_CLIENT_ID: str = ""
    GITHUB_CLIENT_SECRET: SecretStr = SecretStr("")
    OAUTH_TOKEN_ENCRYPTION_KEY: SecretStr = SecretStr("")
    OAUTH_HTTP_TIMEOUT_SECONDS: float = Field(gt=0, default=10.0)

    @field_validator("OAUTH_TOKEN_ENCRYPTION_KEY")
    @classmethod
    def _check_fernet_key(cls, v: SecretStr) -> SecretStr:
        """Rejects keys that are not 32 url-safe base64-encoded bytes."""
        raw = v.get_secret_value()
        if raw and len(raw) != 44:
            logger.error("OAUTH_TOKEN_ENCRYPTION_KEY is not a valid Fernet key.")
            raise ValueError("OAUTH_TOKEN_ENCRYPTION_KEY must be a Fernet key")
        return v
