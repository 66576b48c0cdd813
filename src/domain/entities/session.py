from datetime import datetime  # For timestamp fields
from enum import Enum
from typing import Optional  # For optional fields

import sqlalchemy as sa
from sqlalchemy import DateTime
from sqlmodel import Column, Field, Index, SQLModel, String

from src.utils.clock import utcnow


class DeviceType(str, Enum):
    """Client classification captured when a session is issued."""

    WEB = "web"
    IOS = "ios"
    ANDROID = "android"
    UNKNOWN = "unknown"


class UserSession(SQLModel, table=True):
    """Represents one logical device login holding an opaque bearer token.

    Only a SHA-256 digest of the token is stored, so a leaked table cannot be
    replayed. Lookup by digest is an indexed equality match, which keeps
    validation time independent of the token content. The last four
    characters are kept for masked display.

    A session whose ``expires_at`` is in the past is treated as absent by
    every read path whether or not it has been purged.

    Attributes:
        id: The unique identifier for the session record.
        token_hash: Hex SHA-256 digest of the bearer token.
        token_hint: Last four characters of the token, display only.
        user_id: A foreign key linking the session to the `User` aggregate root.
        device_type: Client classification.
        device_name: Free-form device label supplied by the client.
        user_agent: The User-Agent header at issuance.
        ip_address: The source IP at issuance.
        created_at: The timestamp when the session was issued (UTC).
        expires_at: The timestamp after which the token is rejected (UTC).
    """

    __tablename__ = "user_sessions"  # Explicit table name for clarity

    id: Optional[int] = Field(
        default=None,  # Auto-incremented by database
        primary_key=True,  # Primary key constraint
        description="The unique identifier for the session record.",
    )
    token_hash: str = Field(
        sa_column=Column(String(64), unique=True, nullable=False),
        description="Hex SHA-256 digest of the bearer token.",
    )
    token_hint: str = Field(
        max_length=8,
        description="Last characters of the token, for masked display only.",
    )
    user_id: int = Field(
        foreign_key="users.id",  # References users table
        index=True,  # Index for per-user listing and bulk revocation
        nullable=False,
        description="Foreign key linking the session to the User.",
    )
    device_type: DeviceType = Field(
        default=DeviceType.UNKNOWN,
        sa_column=Column(
            sa.Enum(DeviceType, name="device_type", values_callable=lambda e: [m.value for m in e]),
            nullable=False,
        ),
        description="Client classification (web, ios, android, unknown).",
    )
    device_name: Optional[str] = Field(default=None, max_length=255)
    user_agent: Optional[str] = Field(default=None, max_length=512)
    ip_address: Optional[str] = Field(default=None, max_length=64)
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime, nullable=False),
        description="The timestamp when the session was issued (UTC).",
    )
    expires_at: datetime = Field(
        sa_column=Column(DateTime, nullable=False),
        description="The timestamp when the session expires (UTC).",
    )

    __table_args__ = (
        Index("ix_user_sessions_token_hash", "token_hash", unique=True),  # Validation lookups
        Index("ix_user_sessions_expires_at", "expires_at"),  # Expiry sweep
        {"extend_existing": True},
    )
