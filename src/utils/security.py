"""Security utilities for password hashing and session tokens.

Passwords are hashed with bcrypt directly. bcrypt only considers the first 72
bytes of its input and current releases reject anything longer, so longer
passwords are refused up front instead of being truncated.

Session tokens are opaque random strings with a ``sess_`` prefix. Only their
SHA-256 digest is persisted; the digest is looked up by equality on an indexed
column, so validation cost does not depend on how much of a guessed token is
correct.
"""

import hashlib
import hmac
import secrets
from functools import lru_cache

import bcrypt

from src.core.config.settings import settings

SESSION_TOKEN_PREFIX = "sess_"
SESSION_TOKEN_BYTES = 32  # 256 bits of entropy
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    Args:
        password: Plain text password to hash

    Returns:
        str: Bcrypt-hashed password

    Raises:
        ValueError: If the password is longer than 72 bytes once UTF-8 encoded.
    """
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValueError("Password must be at most 72 bytes")
    return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=settings.BCRYPT_WORK_FACTOR)).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    """Verify a password against its hash.

    Returns False rather than raising for over-long input or a corrupt hash.
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False


@lru_cache(maxsize=1)
def dummy_password_hash() -> str:
    """A throwaway hash checked when the user is unknown, so response time does
    not reveal whether an email is registered."""
    return hash_password(secrets.token_urlsafe(16))


def generate_session_token() -> str:
    """Return a fresh opaque bearer token."""
    return SESSION_TOKEN_PREFIX + secrets.token_urlsafe(SESSION_TOKEN_BYTES)


def hash_session_token(token: str) -> str:
    """Return the hex SHA-256 digest stored in place of the token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def token_hint(token: str) -> str:
    """Last four characters, kept for masked display."""
    return token[-4:]


def mask_token(hint: str) -> str:
    """Display-safe identifier, e.g. ``sess_****a1B2``."""
    return f"{SESSION_TOKEN_PREFIX}****{hint}"


def tokens_match(token: str, token_hash: str) -> bool:
    """Constant-time check that ``token`` digests to ``token_hash``."""
    return hmac.compare_digest(hash_session_token(token), token_hash)
