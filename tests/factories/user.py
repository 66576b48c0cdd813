"""Factory for generating fake users for testing."""

from typing import Optional

from faker import Faker
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.entities.user import Role, User
from src.utils.security import hash_password

fake = Faker()

DEFAULT_PASSWORD = "Str0ngP@ssw0rd"


def build_fake_user(
    email: Optional[str] = None,
    password: Optional[str] = DEFAULT_PASSWORD,
    name: Optional[str] = None,
    role: Role = Role.USER,
    is_active: bool = True,
) -> User:
    """Create an unsaved User entity.

    Args:
        email: Email, defaults to a unique fake email.
        password: Plain password to hash; ``None`` creates an OAuth-only user.
        name: Display name, defaults to a fake name.
        role: User role, defaults to USER.
        is_active: Whether the user is active.
    """
    return User(
        email=(email or fake.unique.email()).lower(),
        hashed_password=hash_password(password) if password is not None else None,
        name=name or fake.name(),
        role=role,
        is_active=is_active,
    )


async def create_fake_user(db_session: AsyncSession, **kwargs) -> User:
    """Persist a fake user and commit."""
    user = build_fake_user(**kwargs)
    db_session.add(user)
    await db_session.commit()
    return user
