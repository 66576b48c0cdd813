"""Centralized, structured exception hierarchy for AuthCore.

This module defines the hierarchy of custom exceptions raised by the
authentication and authorization core. Each exception carries a
machine-readable `code` for programmatic error handling and a human-readable
`message` that is safe to return to the caller.

The hierarchy is designed to:
- Provide clear, specific errors for different failure scenarios.
- Map cleanly to HTTP status codes in the API layer (see `src.core.handlers`).
- Never carry raw token or secret values.
"""

from __future__ import annotations

from typing import Final

__all__: Final = [
    "AuthCoreError",
    "UnauthenticatedError",
    "InvalidSessionError",
    "InvalidCredentialsError",
    "ForbiddenError",
    "CannotUnlinkLastMethodError",
    "NotFoundError",
    "ConflictError",
    "AlreadyLinkedToAnotherUserError",
    "UserAlreadyExistsError",
    "UpstreamFailureError",
    "OAuthExchangeFailedError",
    "ValidationError",
]


class AuthCoreError(Exception):
    """Base exception class for all custom errors in the AuthCore application.

    Attributes:
        message (str): A human-readable error message, safe for API responses.
        code (str): A unique, machine-readable error code.
    """

    message: str
    code: str = "generic_error"

    def __init__(self, message: str, code: str = "generic_error"):
        self.message = message
        self.code = code
        Exception.__init__(self, self.message)

    # A concise, structured representation used by loggers & FastAPI handlers.
    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Authentication errors (401 Unauthorized)
# ---------------------------------------------------------------------------


class UnauthenticatedError(AuthCoreError):
    """Raised when the caller presents no credential, or an invalid one.

    Maps to a `401 Unauthorized` HTTP status code.
    """

    def __init__(self, message: str = "Authentication required", code: str = "unauthenticated"):
        super().__init__(message, code)


class InvalidSessionError(UnauthenticatedError):
    """Raised when a session token is unknown, expired, or already consumed.

    Expired and deleted sessions are indistinguishable to the caller.
    """

    def __init__(self, message: str = "Invalid or expired session", code: str = "invalid_session"):
        super().__init__(message, code)


class InvalidCredentialsError(UnauthenticatedError):
    """Raised when an email/password pair does not match an active user.

    The message is deliberately generic to prevent user enumeration.
    """

    def __init__(self, message: str = "Invalid email or password", code: str = "invalid_credentials"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Authorization errors (403 Forbidden)
# ---------------------------------------------------------------------------


class ForbiddenError(AuthCoreError):
    """Raised when an authenticated user lacks the required role or permission,
    or when an operation would violate an account policy.
    """

    def __init__(self, message: str = "Insufficient permissions", code: str = "forbidden"):
        super().__init__(message, code)


class CannotUnlinkLastMethodError(ForbiddenError):
    """Raised when unlinking a provider would leave the user with no way to sign in."""

    def __init__(
        self,
        message: str = "Cannot unlink the last authentication method",
        code: str = "cannot_unlink_last_method",
    ):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Resource errors (404 Not Found / 409 Conflict)
# ---------------------------------------------------------------------------


class NotFoundError(AuthCoreError):
    """Raised when a session, account or user is absent or not owned by the caller."""

    def __init__(self, message: str = "Resource not found", code: str = "not_found"):
        super().__init__(message, code)


class ConflictError(AuthCoreError):
    """Raised when a write conflicts with existing state. Maps to `409 Conflict`."""

    def __init__(self, message: str = "Conflict with existing state", code: str = "conflict"):
        super().__init__(message, code)


class AlreadyLinkedToAnotherUserError(ConflictError):
    """Raised when a provider identity is already linked to a different user."""

    def __init__(
        self,
        message: str = "This account is already linked to another user",
        code: str = "already_linked",
    ):
        super().__init__(message, code)


class UserAlreadyExistsError(ConflictError):
    """Raised when registering an email that already belongs to a user."""

    def __init__(self, message: str = "A user with this email already exists", code: str = "user_already_exists"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Upstream errors (502 Bad Gateway)
# ---------------------------------------------------------------------------


class UpstreamFailureError(AuthCoreError):
    """Raised when a third-party service fails or answers with garbage."""

    def __init__(self, message: str = "Upstream service failure", code: str = "upstream_failure"):
        super().__init__(message, code)


class OAuthExchangeFailedError(UpstreamFailureError):
    """Raised when the OAuth code exchange or profile fetch fails.

    Only a provider-tagged summary is kept; raw provider bodies never end up
    in the message.

    Attributes:
        provider (str): The provider whose exchange failed.
    """

    def __init__(self, provider: str, message: str | None = None, code: str = "oauth_exchange_failed"):
        self.provider = provider
        super().__init__(message or f"{provider} authentication failed", code)


# ---------------------------------------------------------------------------
# Validation errors (400 Bad Request)
# ---------------------------------------------------------------------------


class ValidationError(AuthCoreError):
    """Raised for malformed input that passed schema validation but is unusable."""

    def __init__(self, message: str = "Invalid request", code: str = "validation_error"):
        super().__init__(message, code)
