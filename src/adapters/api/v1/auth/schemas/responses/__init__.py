"""Response schemas re-exported for convenience."""

from .oauth import AuthorizationUrlOut, LinkedAccountOut, OAuthLoginOut
from .session import SessionIssuedOut, SessionOut
from .user import AdminUserOut, UserOut

__all__ = [
    "AdminUserOut",
    "AuthorizationUrlOut",
    "LinkedAccountOut",
    "OAuthLoginOut",
    "SessionIssuedOut",
    "SessionOut",
    "UserOut",
]
