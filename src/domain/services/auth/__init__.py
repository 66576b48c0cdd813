from .oauth import LinkedAccount, OAuthIdentityLinker
from .session import IssuedSession, SessionTokenManager, SessionView
from .user_authentication import UserAuthenticationService
from .user_management import UserManagementService

__all__ = [
    "IssuedSession",
    "LinkedAccount",
    "OAuthIdentityLinker",
    "SessionTokenManager",
    "SessionView",
    "UserAuthenticationService",
    "UserManagementService",
]
