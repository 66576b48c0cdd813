"""Authentication API schemas package.

Request and response models are grouped in focused modules and re-exported
here so routes can import from ``src.adapters.api.v1.auth.schemas``.
"""

# flake8: noqa: F401 - re-export

from .misc import CamelModel, Envelope, MessageResponse, RevokedResponse, UTCDateTime
from .requests import (
    LoginRequest,
    MobileLoginRequest,
    MobileRefreshRequest,
    OAuthExchangeRequest,
    OAuthLinkRequest,
    RegisterRequest,
)
from .responses import (
    AdminUserOut,
    AuthorizationUrlOut,
    LinkedAccountOut,
    OAuthLoginOut,
    SessionIssuedOut,
    SessionOut,
    UserOut,
)

__all__ = [
    "CamelModel",
    "Envelope",
    "MessageResponse",
    "RevokedResponse",
    "UTCDateTime",
    "RegisterRequest",
    "LoginRequest",
    "MobileLoginRequest",
    "MobileRefreshRequest",
    "OAuthExchangeRequest",
    "OAuthLinkRequest",
    "UserOut",
    "AdminUserOut",
    "SessionIssuedOut",
    "SessionOut",
    "AuthorizationUrlOut",
    "OAuthLoginOut",
    "LinkedAccountOut",
]
