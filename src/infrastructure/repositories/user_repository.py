"""User Repository implementation using SQLAlchemy.

This module provides the concrete credential store used by the authentication
services. It implements :class:`IUserRepository` on top of an
``AsyncSession``; transaction boundaries are left to the caller.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from src.domain.entities.user import User
from src.domain.interfaces.repositories import IUserRepository

logger = get_logger(__name__)


class UserRepository(IUserRepository):
    """SQLAlchemy implementation of IUserRepository.

    Args:
        db_session: SQLAlchemy async session for database operations.
    """

    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session

    async def get_by_id(self, user_id: int) -> Optional[User]:
        if user_id <= 0:
            return None
        result = await self.db_session.execute(select(User).where(User.id == user_id))
        user = result.scalars().first()
        logger.debug("User lookup by ID completed", user_id=user_id, found=user is not None)
        return user

    async def get_by_id_for_update(self, user_id: int) -> Optional[User]:
        # FOR UPDATE is a no-op on SQLite, where BEGIN IMMEDIATE already
        # serializes writers.
        result = await self.db_session.execute(
            select(User).where(User.id == user_id).with_for_update()
        )
        return result.scalars().first()

    async def get_by_email(self, email: str) -> Optional[User]:
        normalized = email.strip().lower()
        if not normalized:
            return None
        result = await self.db_session.execute(select(User).where(User.email == normalized))
        user = result.scalars().first()
        logger.debug("User lookup by email completed", found=user is not None)
        return user

    async def add(self, user: User) -> User:
        user.email = user.email.strip().lower()
        self.db_session.add(user)
        await self.db_session.flush()
        logger.debug("User staged", user_id=user.id)
        return user

    async def list(self, offset: int = 0, limit: int = 50) -> List[User]:
        result = await self.db_session.execute(
            select(User).order_by(User.id).offset(offset).limit(limit)
        )
        return list(result.scalars().all())
