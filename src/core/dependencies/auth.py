"""Request Gate dependencies.

Every protected route resolves its caller through :func:`require_auth`. The
caller is identified by exactly one of two mutually exclusive sources:

* ``BearerIdentity``: a well-formed ``Authorization: Bearer <token>`` header.
  The token is validated against the session store and nothing else is
  consulted, even if it fails.
* ``BrowserIdentity``: no usable bearer header, but a signed browser session
  naming an active user.

Anything else is unauthenticated. Handlers receive an immutable
:class:`AuthenticatedUser` and never the raw entity.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, Optional, Union

import structlog
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import ForbiddenError, UnauthenticatedError
from src.domain.entities.user import Role, User
from src.domain.services.auth.session import SessionTokenManager
from src.infrastructure.database.async_db import get_db
from src.infrastructure.repositories.user_repository import UserRepository
from src.infrastructure.services.authentication.browser_session import (
    clear_browser_session,
    read_browser_user_id,
)
from src.permissions.rbac import AccessControlEvaluator

__all__ = [
    "AuthSource",
    "AuthenticatedUser",
    "BearerIdentity",
    "BrowserIdentity",
    "Anonymous",
    "ResolvedIdentity",
    "extract_bearer_token",
    "resolve_identity",
    "require_auth",
    "require_admin",
    "get_access_control",
    "CurrentUser",
    "AdminUser",
    "DBSession",
]

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Resolved identities
# ---------------------------------------------------------------------------


class AuthSource(str, Enum):
    BEARER = "bearer"
    BROWSER = "browser"


@dataclass(frozen=True)
class BearerIdentity:
    token: str = field(repr=False)


@dataclass(frozen=True)
class BrowserIdentity:
    user_id: int


@dataclass(frozen=True)
class Anonymous:
    pass


ResolvedIdentity = Union[BearerIdentity, BrowserIdentity, Anonymous]


@dataclass(frozen=True)
class AuthenticatedUser:
    """Immutable caller context handed to route handlers."""

    id: int
    email: str
    name: str
    role: Role
    source: AuthSource
    session_token: Optional[str] = field(default=None, repr=False)

    @classmethod
    def from_user(cls, user: User, source: AuthSource, session_token: Optional[str] = None) -> "AuthenticatedUser":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            role=user.role,
            source=source,
            session_token=session_token,
        )


# ---------------------------------------------------------------------------
# Type-annotated dependency shortcuts
# ---------------------------------------------------------------------------


DBSession = Annotated[AsyncSession, Depends(get_db)]


def get_access_control(request: Request) -> AccessControlEvaluator:
    """The process-wide evaluator built at application start."""
    return request.app.state.access_control


AccessControl = Annotated[AccessControlEvaluator, Depends(get_access_control)]


# ---------------------------------------------------------------------------
# Identity resolution
# ---------------------------------------------------------------------------


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Token from an ``Authorization`` header, or None when absent or malformed."""
    if not authorization:
        return None
    scheme, _, credentials = authorization.strip().partition(" ")
    credentials = credentials.strip()
    if scheme.lower() != "bearer" or not credentials or " " in credentials:
        return None
    return credentials


def resolve_identity(request: Request) -> ResolvedIdentity:
    """Pick the single credential source for this request.

    A well-formed bearer header always wins; the browser session is only
    looked at when there is none.
    """
    token = extract_bearer_token(request.headers.get("authorization"))
    if token is not None:
        return BearerIdentity(token=token)
    user_id = read_browser_user_id(request)
    if user_id is not None:
        return BrowserIdentity(user_id=user_id)
    return Anonymous()


# ---------------------------------------------------------------------------
# Public dependencies
# ---------------------------------------------------------------------------


async def require_auth(request: Request, db_session: DBSession) -> AuthenticatedUser:
    """Return the authenticated caller or raise ``UnauthenticatedError``.

    Performs **no** role checks; see :func:`require_admin` and
    :func:`src.permissions.dependencies.require_permission`.
    """
    identity = resolve_identity(request)

    if isinstance(identity, BearerIdentity):
        user = await SessionTokenManager(db_session).validate(identity.token)
        caller = AuthenticatedUser.from_user(user, AuthSource.BEARER, identity.token)
    elif isinstance(identity, BrowserIdentity):
        user = await UserRepository(db_session).get_by_id(identity.user_id)
        await db_session.commit()
        if user is None or not user.is_active:
            clear_browser_session(request)
            await logger.awarning("Browser session for missing or inactive user", user_id=identity.user_id)
            raise UnauthenticatedError()
        caller = AuthenticatedUser.from_user(user, AuthSource.BROWSER)
    else:
        raise UnauthenticatedError()

    structlog.contextvars.bind_contextvars(user_id=caller.id, auth_source=caller.source.value)
    request.state.user = caller
    return caller


CurrentUser = Annotated[AuthenticatedUser, Depends(require_auth)]


async def require_admin(current_user: CurrentUser, access_control: AccessControl) -> AuthenticatedUser:
    """Ensure the authenticated user has the *ADMIN* role."""
    if not access_control.has_role(current_user, [Role.ADMIN]):
        await logger.awarning("Admin role required", user_id=current_user.id, role=current_user.role.value)
        raise ForbiddenError("Administrator privileges required")
    return current_user


AdminUser = Annotated[AuthenticatedUser, Depends(require_admin)]
