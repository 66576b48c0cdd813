"""Admin API Request Schemas

Request bodies for the user administration endpoints.
"""

from pydantic import Field

from src.adapters.api.v1.auth.schemas import CamelModel
from src.domain.entities.user import Role


class RoleUpdateRequest(CamelModel):
    """Request schema for changing a user's role."""

    role: Role = Field(..., description="The new role", examples=["editor"])


class StatusUpdateRequest(CamelModel):
    """Request schema for activating or deactivating a user."""

    is_active: bool = Field(..., description="False revokes every session of the user")
