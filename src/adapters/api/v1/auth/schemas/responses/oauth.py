"""Response models for OAuth endpoints."""

from typing import Optional

from src.domain.value_objects.oauth_provider import Provider

from ..misc import CamelModel, UTCDateTime
from .user import UserOut


class AuthorizationUrlOut(CamelModel):
    authorization_url: str
    state: str


class OAuthLoginOut(CamelModel):
    """Result of an exchange: the user, plus a session for mobile clients."""

    user: UserOut
    session_token: Optional[str] = None
    expires_at: Optional[UTCDateTime] = None


class LinkedAccountOut(CamelModel):
    provider: Provider
    linked_at: UTCDateTime
