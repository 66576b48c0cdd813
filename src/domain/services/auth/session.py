from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from src.core.config.settings import settings
from src.core.exceptions import InvalidSessionError, NotFoundError
from src.domain.entities.session import DeviceType, UserSession
from src.domain.entities.user import User
from src.domain.value_objects.device_info import DeviceInfo
from src.utils.clock import utcnow
from src.utils.security import (
    SESSION_TOKEN_PREFIX,
    generate_session_token,
    hash_session_token,
    mask_token,
    token_hint,
    tokens_match,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class IssuedSession:
    """A freshly issued session. ``token`` is the only copy of the plaintext."""

    token: str = field(repr=False)
    session: UserSession

    @property
    def expires_at(self) -> datetime:
        return self.session.expires_at


@dataclass(frozen=True)
class SessionView:
    """Display-safe projection of a session for listings."""

    id: int
    masked_token: str
    device_type: DeviceType
    device_name: Optional[str]
    user_agent: Optional[str]
    ip_address: Optional[str]
    created_at: datetime
    expires_at: datetime
    is_current: bool


class SessionTokenManager:
    """Issues, validates, refreshes, lists and revokes bearer session tokens.

    Every mutating method runs as a single transaction on ``db_session`` and
    commits before returning; on any failure, including task cancellation, the
    transaction is rolled back so no partial state is ever persisted.

    Expired sessions are filtered out by every query, so correctness never
    depends on :meth:`purge_expired` having run.

    Attributes:
        db_session (AsyncSession): SQLAlchemy async session for database operations.
    """

    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session

    @staticmethod
    def ttl_for(device_type: DeviceType) -> timedelta:
        """Session lifetime for a device class: shorter for browsers."""
        if device_type is DeviceType.WEB:
            return timedelta(days=settings.SESSION_TTL_WEB_DAYS)
        return timedelta(days=settings.SESSION_TTL_MOBILE_DAYS)

    def _stage(self, user_id: int, device: DeviceInfo) -> IssuedSession:
        token = generate_session_token()
        now = utcnow()
        record = UserSession(
            token_hash=hash_session_token(token),
            token_hint=token_hint(token),
            user_id=user_id,
            device_type=device.device_type,
            device_name=device.device_name,
            user_agent=device.user_agent,
            ip_address=device.ip_address,
            created_at=now,
            expires_at=now + self.ttl_for(device.device_type),
        )
        self.db_session.add(record)
        return IssuedSession(token=token, session=record)

    async def create(self, user_id: int, device: DeviceInfo) -> IssuedSession:
        """Issue a new session for ``user_id``.

        Args:
            user_id (int): Owner of the session.
            device (DeviceInfo): Client metadata captured at login.

        Returns:
            IssuedSession: The persisted session plus its plaintext token. The
            token is not recoverable afterwards.
        """
        try:
            issued = self._stage(user_id, device)
            await self.db_session.commit()
        except BaseException:
            await self.db_session.rollback()
            raise

        await logger.ainfo(
            "Session created",
            user_id=user_id,
            session_id=issued.session.id,
            device_type=device.device_type.value,
        )
        return issued

    async def validate(self, token: str) -> User:
        """Resolve a bearer token to its active owner.

        Read-only: nothing is written, even on failure.

        Raises:
            InvalidSessionError: If no non-expired session matches the token,
                or its owner has been deactivated.
        """
        if not token or not token.startswith(SESSION_TOKEN_PREFIX):
            raise InvalidSessionError()

        statement = (
            select(User)
            .join(UserSession, UserSession.user_id == User.id)
            .where(
                UserSession.token_hash == hash_session_token(token),
                UserSession.expires_at > utcnow(),
                User.is_active.is_(True),
            )
        )
        result = await self.db_session.execute(statement)
        user = result.scalars().first()
        # Ends the read transaction; loaded objects are kept (expire_on_commit=False).
        await self.db_session.commit()

        if user is None:
            await logger.adebug("Session validation failed")
            raise InvalidSessionError()
        return user

    async def refresh(self, old_token: str, device: DeviceInfo) -> IssuedSession:
        """Atomically replace ``old_token`` with a new session for the same user.

        The old row is locked, deleted and its successor inserted in one
        transaction. A concurrent refresh of the same token either waits for
        the lock and then finds nothing, or loses the delete compare-and-swap;
        both end in ``InvalidSessionError``, so at most one session ever
        descends from a given token.

        Device fields not supplied in ``device`` are carried over from the old
        session.

        Raises:
            InvalidSessionError: If the old token is absent, expired, already
                refreshed, or owned by an inactive user.
        """
        if not old_token or not old_token.startswith(SESSION_TOKEN_PREFIX):
            raise InvalidSessionError()

        try:
            statement = (
                select(UserSession, User)
                .join(User, User.id == UserSession.user_id)
                .where(
                    UserSession.token_hash == hash_session_token(old_token),
                    UserSession.expires_at > utcnow(),
                    User.is_active.is_(True),
                )
                .with_for_update(of=UserSession)
            )
            row = (await self.db_session.execute(statement)).first()
            if row is None:
                raise InvalidSessionError()
            old, user = row

            deleted = await self.db_session.execute(
                delete(UserSession).where(UserSession.id == old.id)
            )
            if deleted.rowcount != 1:
                raise InvalidSessionError()

            merged = DeviceInfo(
                device_type=(
                    device.device_type if device.device_type is not DeviceType.UNKNOWN else old.device_type
                ),
                device_name=device.device_name or old.device_name,
                user_agent=device.user_agent or old.user_agent,
                ip_address=device.ip_address or old.ip_address,
            )
            issued = self._stage(user.id, merged)
            await self.db_session.commit()
        except BaseException:
            await self.db_session.rollback()
            raise

        await logger.ainfo(
            "Session refreshed",
            user_id=user.id,
            old_session_id=old.id,
            session_id=issued.session.id,
        )
        return issued

    async def delete(self, token: str) -> None:
        """Revoke a single session by token. Deleting an unknown token is a no-op."""
        try:
            result = await self.db_session.execute(
                delete(UserSession).where(UserSession.token_hash == hash_session_token(token))
            )
            await self.db_session.commit()
        except BaseException:
            await self.db_session.rollback()
            raise
        await logger.ainfo("Session deleted", deleted=result.rowcount)

    async def delete_for_user(self, session_id: int, user_id: int) -> None:
        """Revoke one of ``user_id``'s sessions by id (remote logout).

        Ownership is part of the delete predicate itself, so there is no gap
        between checking and deleting.

        Raises:
            NotFoundError: If the session does not exist or belongs to someone else.
        """
        try:
            result = await self.db_session.execute(
                delete(UserSession).where(
                    UserSession.id == session_id,
                    UserSession.user_id == user_id,
                )
            )
            if result.rowcount != 1:
                raise NotFoundError("Session not found")
            await self.db_session.commit()
        except BaseException:
            await self.db_session.rollback()
            raise
        await logger.ainfo("Session revoked by owner", user_id=user_id, session_id=session_id)

    async def delete_all_for_user(self, user_id: int) -> int:
        """Revoke every session owned by ``user_id`` ("logout everywhere").

        Returns:
            int: Number of sessions removed.
        """
        try:
            result = await self.db_session.execute(
                delete(UserSession).where(UserSession.user_id == user_id)
            )
            await self.db_session.commit()
        except BaseException:
            await self.db_session.rollback()
            raise
        await logger.ainfo("All sessions deleted", user_id=user_id, deleted=result.rowcount)
        return result.rowcount

    async def list_for_user(self, user_id: int, current_token: Optional[str] = None) -> List[SessionView]:
        """List live sessions in creation order without exposing token material.

        Args:
            user_id (int): Owner whose sessions are listed.
            current_token (Optional[str]): The caller's own bearer token, used to
                flag the matching entry with ``is_current``.
        """
        result = await self.db_session.execute(
            select(UserSession)
            .where(UserSession.user_id == user_id, UserSession.expires_at > utcnow())
            .order_by(UserSession.created_at, UserSession.id)
        )
        records = list(result.scalars().all())
        await self.db_session.commit()

        return [
            SessionView(
                id=record.id,
                masked_token=mask_token(record.token_hint),
                device_type=record.device_type,
                device_name=record.device_name,
                user_agent=record.user_agent,
                ip_address=record.ip_address,
                created_at=record.created_at,
                expires_at=record.expires_at,
                is_current=bool(current_token) and tokens_match(current_token, record.token_hash),
            )
            for record in records
        ]

    async def purge_expired(self) -> int:
        """Physically delete expired sessions. Storage hygiene only."""
        try:
            result = await self.db_session.execute(
                delete(UserSession).where(UserSession.expires_at <= utcnow())
            )
            await self.db_session.commit()
        except BaseException:
            await self.db_session.rollback()
            raise
        if result.rowcount:
            await logger.ainfo("Expired sessions purged", deleted=result.rowcount)
        return result.rowcount
