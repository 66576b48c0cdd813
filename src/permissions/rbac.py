"""Role-based access control evaluation.

The role -> permission map is derived once from the Casbin policy, including
inherited roles, and frozen. All queries afterwards are pure lookups with no
I/O and no side effects.
"""

from enum import Enum
from types import MappingProxyType
from typing import FrozenSet, Iterable, Mapping, Optional, Protocol

import casbin
import structlog

from src.domain.entities.user import Role

from .enforcer import load_enforcer

logger = structlog.get_logger(__name__)


class Permission(str, Enum):
    """Application capabilities, written as ``resource:action``."""

    PROFILE_READ = "profile:read"
    PROFILE_UPDATE = "profile:update"
    SESSIONS_MANAGE_OWN = "sessions:manage-own"
    ACCOUNTS_LINK = "accounts:link"
    CONTENT_MANAGE = "content:manage"
    USERS_LIST = "users:list"
    USERS_UPDATE_ROLE = "users:update-role"
    USERS_UPDATE_STATUS = "users:update-status"
    SETTINGS_READ = "settings:read"
    SETTINGS_WRITE = "settings:write"

    @classmethod
    def from_policy(cls, resource: str, action: str) -> "Permission":
        return cls(f"{resource}:{action}")


class HasRole(Protocol):
    role: Role


class AccessControlEvaluator:
    """Answers permission and role questions from a static role map.

    Args:
        enforcer: Casbin enforcer to derive the map from. Defaults to the
            enforcer built from the bundled policy files.

    Raises:
        ValueError: If the policy grants a permission token that is not a
            member of :class:`Permission`.
    """

    def __init__(self, enforcer: Optional[casbin.Enforcer] = None):
        enforcer = enforcer or load_enforcer()
        role_map = {}
        for role in Role:
            permissions = set()
            for _subject, resource, action in enforcer.get_implicit_permissions_for_user(role.value):
                permissions.add(Permission.from_policy(resource, action))
            role_map[role] = frozenset(permissions)
        self._role_map: Mapping[Role, FrozenSet[Permission]] = MappingProxyType(role_map)
        logger.info(
            "Access control map loaded",
            roles={role.value: len(perms) for role, perms in self._role_map.items()},
        )

    def permissions_for(self, role: Role) -> FrozenSet[Permission]:
        """All permissions granted to ``role``, including inherited ones."""
        return self._role_map.get(role, frozenset())

    def has_permission(self, role: Role, permission: Permission) -> bool:
        return permission in self.permissions_for(role)

    def has_role(self, user: HasRole, required_roles: Iterable[Role]) -> bool:
        """True when the user's role is one of ``required_roles``."""
        return user.role in set(required_roles)
