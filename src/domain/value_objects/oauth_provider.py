"""OAuth Provider Value Objects.

This module defines the supported OAuth providers and the immutable profile
returned by a successful authorization-code exchange.

Profile constructors validate the provider payload and raise ``ValueError`` on
anything malformed; the exchange client translates that into a provider-tagged
``OAuthExchangeFailedError``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Optional

import structlog

logger = structlog.get_logger(__name__)


class Provider(str, Enum):
    """Supported OAuth providers.

    Attributes:
        GOOGLE: Google OAuth 2.0.
        GITHUB: GitHub OAuth Apps.
    """

    GOOGLE = "google"
    GITHUB = "github"


@dataclass(frozen=True)
class ProviderProfile:
    """Identity data reported by a provider for the signed-in account.

    Attributes:
        account_id: The provider-scoped account identifier.
        email: Lower-cased email, if the provider disclosed one.
        email_verified: Whether the provider vouches for ``email``.
        name: Display name.
        avatar_url: Profile picture URL.
        access_token: Provider access token. Never included in ``repr``.
    """

    account_id: str
    email: Optional[str] = None
    email_verified: bool = False
    name: Optional[str] = None
    avatar_url: Optional[str] = None
    access_token: Optional[str] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not self.account_id:
            raise ValueError("Provider profile must carry an account id")
        if self.email is not None:
            if "@" not in self.email:
                raise ValueError("Provider profile carries a malformed email")
            object.__setattr__(self, "email", self.email.strip().lower())

    @property
    def verified_email(self) -> Optional[str]:
        """The email, only when the provider marked it verified."""
        return self.email if self.email_verified else None

    @classmethod
    def from_google(cls, payload: Mapping[str, Any], access_token: Optional[str] = None) -> "ProviderProfile":
        """Builds a profile from Google's ``/oauth2/v2/userinfo`` payload.

        Raises:
            ValueError: If the payload is not an object or lacks ``id``.
        """
        if not isinstance(payload, Mapping):
            raise ValueError("Google userinfo payload is not an object")
        account_id = payload.get("id") or payload.get("sub")
        return cls(
            account_id=str(account_id) if account_id else "",
            email=payload.get("email"),
            email_verified=bool(payload.get("verified_email", payload.get("email_verified", False))),
            name=payload.get("name"),
            avatar_url=payload.get("picture"),
            access_token=access_token,
        )

    @classmethod
    def from_github(
        cls,
        user: Mapping[str, Any],
        emails: Iterable[Mapping[str, Any]],
        access_token: Optional[str] = None,
    ) -> "ProviderProfile":
        """Builds a profile from GitHub's ``/user`` and ``/user/emails`` payloads.

        The primary verified address wins; failing that, any verified address.
        The public ``/user`` email is only used as an unverified fallback.

        Raises:
            ValueError: If either payload has the wrong shape or ``id`` is missing.
        """
        if not isinstance(user, Mapping):
            raise ValueError("GitHub user payload is not an object")
        if not isinstance(emails, list):
            raise ValueError("GitHub emails payload is not a list")

        verified = [e for e in emails if isinstance(e, Mapping) and e.get("verified") and e.get("email")]
        primary = next((e for e in verified if e.get("primary")), None) or (verified[0] if verified else None)

        if primary is not None:
            email, email_verified = primary["email"], True
        else:
            email, email_verified = user.get("email"), False

        account_id = user.get("id")
        return cls(
            account_id=str(account_id) if account_id is not None else "",
            email=email,
            email_verified=email_verified,
            name=user.get("name") or user.get("login"),
            avatar_url=user.get("avatar_url"),
            access_token=access_token,
        )
