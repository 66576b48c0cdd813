"""Domain Services for the Authentication Bounded Context.

Authentication Domain Services:
- Session Token Manager: bearer session issuance, validation, refresh and revocation
- OAuth Identity Linker: provider identity resolution, linking and unlinking
- User Authentication: email/password login and registration
- User Management: administrative role and status changes
"""

from .auth import (
    OAuthIdentityLinker,
    SessionTokenManager,
    UserAuthenticationService,
    UserManagementService,
)

__all__ = [
    "OAuthIdentityLinker",
    "SessionTokenManager",
    "UserAuthenticationService",
    "UserManagementService",
]
