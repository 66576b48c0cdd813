"""User administration endpoints.

All routes require the admin role; each one additionally checks the specific
permission token so the policy file stays the single source of truth.
"""

from typing import List

from fastapi import APIRouter, Depends, Query

from src.adapters.api.v1.admin.schemas import RoleUpdateRequest, StatusUpdateRequest
from src.adapters.api.v1.auth.dependencies import UserManagement
from src.adapters.api.v1.auth.schemas import AdminUserOut, Envelope
from src.core.dependencies.auth import AuthenticatedUser, require_admin
from src.permissions.dependencies import require_permission
from src.permissions.rbac import Permission

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("", response_model=Envelope[List[AdminUserOut]], summary="List users")
async def list_users(
    management: UserManagement,
    offset: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    current_user: AuthenticatedUser = Depends(require_permission(Permission.USERS_LIST)),
):
    users = await management.list_users(offset=offset, limit=limit)
    return Envelope(data=[AdminUserOut.model_validate(user) for user in users])


@router.patch("/{user_id}/role", response_model=Envelope[AdminUserOut], summary="Change a user's role")
async def change_role(
    user_id: int,
    payload: RoleUpdateRequest,
    management: UserManagement,
    current_user: AuthenticatedUser = Depends(require_permission(Permission.USERS_UPDATE_ROLE)),
):
    """
    Raises:
        ForbiddenError: If an admin tries to demote themselves.
        NotFoundError: If the user does not exist.
    """
    user = await management.change_role(current_user.id, user_id, payload.role)
    return Envelope(data=AdminUserOut.model_validate(user))


@router.patch("/{user_id}/status", response_model=Envelope[AdminUserOut], summary="Activate or deactivate a user")
async def set_status(
    user_id: int,
    payload: StatusUpdateRequest,
    management: UserManagement,
    current_user: AuthenticatedUser = Depends(require_permission(Permission.USERS_UPDATE_STATUS)),
):
    """Deactivation also revokes every bearer session of the user."""
    user = await management.set_active(current_user.id, user_id, payload.is_active)
    return Envelope(data=AdminUserOut.model_validate(user))
