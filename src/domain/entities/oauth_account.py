from datetime import datetime  # For timestamp fields
from typing import Optional  # For optional fields

import sqlalchemy as sa
from sqlalchemy import DateTime, LargeBinary
from sqlmodel import Column, Field, Index, SQLModel, String

from src.domain.value_objects.oauth_provider import Provider
from src.utils.clock import utcnow


class OAuthAccount(SQLModel, table=True):
    """Represents a link between a User and an external OAuth provider identity.

    A ``(provider, provider_account_id)`` pair maps to at most one user, and a
    user holds at most one account per provider. The provider access token is
    optional and Fernet-encrypted at rest when present.

    Attributes:
        id: The unique identifier for the OAuth account record.
        user_id: A foreign key that links this account to the `User` aggregate.
        provider: The OAuth provider (google or github).
        provider_account_id: The user's identifier at the provider.
        provider_email: Email reported by the provider at the last sign-in.
        provider_name: Display name reported by the provider.
        provider_avatar: Avatar URL reported by the provider.
        access_token: The encrypted provider access token, if cached.
        created_at: When the account was linked (UTC).
        updated_at: When the cached profile was last refreshed (UTC).
    """

    __tablename__ = "oauth_accounts"  # Explicit table name for clarity

    id: Optional[int] = Field(
        default=None,  # Auto-incremented by database
        primary_key=True,  # Primary key constraint
        description="The unique identifier for the OAuth account.",
    )
    user_id: int = Field(
        foreign_key="users.id",  # References users table
        nullable=False,  # Required field
        description="Foreign key linking this account to a User.",
    )
    provider: Provider = Field(
        sa_column=Column(
            sa.Enum(Provider, name="oauth_provider", values_callable=lambda e: [m.value for m in e]),
            nullable=False,
        ),
        description="The OAuth provider (e.g., Google, GitHub).",
    )
    provider_account_id: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="The unique identifier for the user at the OAuth provider.",
    )
    provider_email: Optional[str] = Field(default=None, max_length=320)
    provider_name: Optional[str] = Field(default=None, max_length=255)
    provider_avatar: Optional[str] = Field(default=None, max_length=2048)
    access_token: Optional[bytes] = Field(
        default=None,
        sa_column=Column(LargeBinary, nullable=True),  # Encrypted token
        description="The encrypted OAuth access token.",
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime, nullable=False),
        description="The timestamp when the account was linked (UTC).",
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime, nullable=False, onupdate=utcnow),
        description="The timestamp of the last cached-profile refresh (UTC).",
    )

    __table_args__ = (
        Index(
            "ix_oauth_accounts_provider_account", "provider", "provider_account_id", unique=True
        ),  # One user per provider identity
        Index("ix_oauth_accounts_user_provider", "user_id", "provider", unique=True),  # One link per provider
        {"extend_existing": True},
    )
