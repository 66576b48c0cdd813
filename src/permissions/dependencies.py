"""
Permission Dependencies Module

This module defines the FastAPI dependency factory that protects endpoints with a single permission
check. The caller is first authenticated through :func:`src.core.dependencies.auth.require_auth`;
the permission is then looked up in the process-wide :class:`AccessControlEvaluator`.

**Security Note**: Permission denial events are logged with the user id, role and permission so
privilege escalation attempts can be audited.

Key Components:
    - require_permission: A factory function that creates a FastAPI dependency enforcing one permission.
"""

from typing import Awaitable, Callable

import structlog

from src.core.dependencies.auth import AccessControl, AuthenticatedUser, CurrentUser
from src.core.exceptions import ForbiddenError

from .rbac import Permission

logger = structlog.get_logger(__name__)


def require_permission(permission: Permission) -> Callable[..., Awaitable[AuthenticatedUser]]:
    """
    Create a dependency that admits only callers whose role grants ``permission``.

    Args:
        permission (Permission): The capability the endpoint requires.

    Returns:
        A FastAPI dependency returning the authenticated caller.

    Example:
        `@router.get('/users', dependencies=[Depends(require_permission(Permission.USERS_LIST))])`
    """

    async def permission_dependency(current_user: CurrentUser, access_control: AccessControl) -> AuthenticatedUser:
        if not access_control.has_permission(current_user.role, permission):
            await logger.awarning(
                "Permission denied",
                user_id=current_user.id,
                role=current_user.role.value,
                permission=permission.value,
            )
            raise ForbiddenError()
        return current_user

    return permission_dependency
