from datetime import datetime  # For timestamp fields
from enum import Enum  # For type-safe role enumeration
from typing import Optional  # For optional fields

import sqlalchemy as sa  # For the portable role enum column
from sqlalchemy import DateTime  # Explicit DateTime type
from sqlmodel import Column, Field, SQLModel, String  # For ORM and table definition

from src.utils.clock import utcnow


class Role(str, Enum):
    """Represents the role of a user within the system (RBAC).

    Roles are ordered by privilege: every permission granted to USER is also
    granted to EDITOR, and every permission granted to EDITOR is also granted
    to ADMIN (see ``src/permissions/policy.csv``).

    Attributes:
        USER: A standard user with regular access rights.
        EDITOR: May additionally manage content.
        ADMIN: Confers administrative privileges for system management.
    """

    USER = "user"
    EDITOR = "editor"
    ADMIN = "admin"


class User(SQLModel, table=True):
    """Represents a User entity and acts as an Aggregate Root.

    Users sign in with a password, with one or more linked OAuth providers, or
    both. Users are never deleted by this service; deactivation flips
    ``is_active`` and revokes every session.

    Attributes:
        id: The unique identifier for the user (primary key).
        email: A unique, lower-cased email address.
        hashed_password: The bcrypt hash of the password. Null for users who
            only authenticate via OAuth.
        name: Display name.
        avatar_url: Optional profile picture, usually copied from a provider.
        role: The user's role, determining their permissions within the system.
        is_active: Inactive users cannot authenticate by any method.
        created_at: The timestamp of when the user account was created.
        updated_at: The timestamp of the last update to the user's record.
    """

    __tablename__ = "users"  # Explicit table name for clarity

    id: Optional[int] = Field(
        default=None,  # Auto-incremented by database
        primary_key=True,  # Primary key constraint
        description="The unique identifier for the user.",
    )
    email: str = Field(
        sa_column=Column(String(320), unique=True, index=True, nullable=False),
        description="Unique, lower-cased email address.",
    )
    hashed_password: Optional[str] = Field(
        default=None,  # Optional for OAuth users
        max_length=255,  # Sufficient for bcrypt hashes
        description="Bcrypt-hashed password. Null for users authenticating via OAuth.",
    )
    name: str = Field(
        default="",
        max_length=255,
        description="Display name.",
    )
    avatar_url: Optional[str] = Field(
        default=None,
        max_length=2048,
        description="Profile picture URL.",
    )
    role: Role = Field(
        default=Role.USER,
        sa_column=Column(
            sa.Enum(Role, name="user_role", values_callable=lambda e: [m.value for m in e]),
            default=Role.USER,
            nullable=False,
        ),
        description="The user's role, used for role-based access control (RBAC).",
    )
    is_active: bool = Field(
        default=True,  # Active by default
        description="Indicates if the user's account is active. Inactive users cannot log in.",
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime, nullable=False),
        description="The timestamp of when the user account was created (UTC).",
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime, nullable=False, onupdate=utcnow),
        description="The timestamp of the last update to the user's record (UTC).",
    )

    @property
    def has_password(self) -> bool:
        return self.hashed_password is not None
