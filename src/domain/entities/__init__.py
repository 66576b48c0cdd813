"""Export authentication-related domain entities for use across the application.

This module provides a clean interface for importing the User, UserSession and
OAuthAccount models. Importing it registers every table with SQLModel metadata.
"""

from .oauth_account import OAuthAccount
from .session import DeviceType, UserSession
from .user import Role, User

__all__ = ["User", "Role", "UserSession", "DeviceType", "OAuthAccount"]
