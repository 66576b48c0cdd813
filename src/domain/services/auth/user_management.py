from typing import List

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from src.core.exceptions import ForbiddenError, NotFoundError
from src.domain.entities.session import UserSession
from src.domain.entities.user import Role, User
from src.infrastructure.repositories.user_repository import UserRepository
from src.utils.clock import utcnow

logger = get_logger(__name__)


class UserManagementService:
    """Administrative changes to users: listing, role changes and (de)activation.

    Deactivating a user also deletes all of their sessions in the same
    transaction, so no bearer token outlives the account.
    """

    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session
        self.users = UserRepository(db_session)

    async def list_users(self, offset: int = 0, limit: int = 50) -> List[User]:
        users = await self.users.list(offset=offset, limit=limit)
        await self.db_session.commit()
        return users

    async def change_role(self, actor_id: int, user_id: int, role: Role) -> User:
        """Set ``user_id``'s role.

        Raises:
            NotFoundError: If the user does not exist.
            ForbiddenError: If an admin tries to demote themselves.
        """
        try:
            user = await self.users.get_by_id_for_update(user_id)
            if user is None:
                raise NotFoundError("User not found")
            if actor_id == user_id and role is not Role.ADMIN:
                raise ForbiddenError("Administrators cannot demote themselves")
            user.role = role
            user.updated_at = utcnow()
            await self.users.add(user)
            await self.db_session.commit()
        except BaseException:
            await self.db_session.rollback()
            raise

        await logger.ainfo("User role changed", actor_id=actor_id, user_id=user_id, role=role.value)
        return user

    async def set_active(self, actor_id: int, user_id: int, is_active: bool) -> User:
        """Activate or deactivate ``user_id``.

        Raises:
            NotFoundError: If the user does not exist.
            ForbiddenError: If an admin tries to deactivate themselves.
        """
        try:
            user = await self.users.get_by_id_for_update(user_id)
            if user is None:
                raise NotFoundError("User not found")
            if actor_id == user_id and not is_active:
                raise ForbiddenError("Administrators cannot deactivate themselves")
            user.is_active = is_active
            user.updated_at = utcnow()
            await self.users.add(user)
            revoked = 0
            if not is_active:
                result = await self.db_session.execute(
                    delete(UserSession).where(UserSession.user_id == user_id)
                )
                revoked = result.rowcount
            await self.db_session.commit()
        except BaseException:
            await self.db_session.rollback()
            raise

        await logger.ainfo(
            "User status changed", actor_id=actor_id, user_id=user_id, is_active=is_active, sessions_revoked=revoked
        )
        return user
