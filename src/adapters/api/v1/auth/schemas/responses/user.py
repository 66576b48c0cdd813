"""Response model for user data."""

from typing import Optional

from src.domain.entities.user import Role

from ..misc import CamelModel, UTCDateTime


class UserOut(CamelModel):
    """Public view of a user as embedded in session issuance responses."""

    id: int
    email: str
    name: str
    role: Role


class AdminUserOut(UserOut):
    """User view for administrators."""

    avatar_url: Optional[str] = None
    is_active: bool
    created_at: UTCDateTime
    updated_at: UTCDateTime
