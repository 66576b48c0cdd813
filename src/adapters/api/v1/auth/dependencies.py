"""FastAPI dependency providers for authentication services."""

from typing import Annotated

from fastapi import Depends, Request

from src.core.dependencies.auth import DBSession
from src.domain.services.auth.oauth import OAuthIdentityLinker
from src.domain.services.auth.session import SessionTokenManager
from src.domain.services.auth.user_authentication import UserAuthenticationService
from src.domain.services.auth.user_management import UserManagementService
from src.infrastructure.services.authentication.oauth import OAuthProviderClient

# ---------------------------------------------------------------------------
# Public factories
# ---------------------------------------------------------------------------


def get_session_manager(db: DBSession) -> SessionTokenManager:  # noqa: D401
    """Factory that returns :class:`SessionTokenManager`."""

    return SessionTokenManager(db)


def get_user_auth_service(db: DBSession) -> UserAuthenticationService:  # noqa: D401
    """Factory that returns :class:`UserAuthenticationService`."""

    return UserAuthenticationService(db)


def get_user_management_service(db: DBSession) -> UserManagementService:  # noqa: D401
    """Factory that returns :class:`UserManagementService`."""

    return UserManagementService(db)


def get_oauth_linker(request: Request, db: DBSession) -> OAuthIdentityLinker:  # noqa: D401
    """Factory that returns :class:`OAuthIdentityLinker` with the app's token cipher."""

    return OAuthIdentityLinker(db, fernet=request.app.state.token_cipher)


def get_oauth_client(request: Request) -> OAuthProviderClient:  # noqa: D401
    """The process-wide provider client."""

    return request.app.state.oauth_client


# ---------------------------------------------------------------------------
# Type aliases for dependency overrides - keeps signature noise low.
# ---------------------------------------------------------------------------

SessionManager = Annotated[SessionTokenManager, Depends(get_session_manager)]
UserAuthService = Annotated[UserAuthenticationService, Depends(get_user_auth_service)]
UserManagement = Annotated[UserManagementService, Depends(get_user_management_service)]
IdentityLinker = Annotated[OAuthIdentityLinker, Depends(get_oauth_linker)]
ProviderClient = Annotated[OAuthProviderClient, Depends(get_oauth_client)]
