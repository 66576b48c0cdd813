from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from cryptography.fernet import Fernet
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from src.core.config.settings import settings
from src.core.exceptions import (
    AlreadyLinkedToAnotherUserError,
    CannotUnlinkLastMethodError,
    ConflictError,
    NotFoundError,
    UnauthenticatedError,
    ValidationError,
)
from src.domain.entities.oauth_account import OAuthAccount
from src.domain.entities.user import Role, User
from src.domain.value_objects.oauth_provider import Provider, ProviderProfile
from src.infrastructure.repositories.user_repository import UserRepository
from src.utils.clock import utcnow

logger = get_logger(__name__)


@dataclass(frozen=True)
class LinkedAccount:
    """A provider identity linked to a user, without any token material."""

    provider: Provider
    linked_at: datetime


def build_token_cipher() -> Optional[Fernet]:
    """Fernet cipher for provider tokens, or None when caching is disabled."""
    key = settings.OAUTH_TOKEN_ENCRYPTION_KEY.get_secret_value()
    return Fernet(key.encode()) if key else None


class OAuthIdentityLinker:
    """
    Links third-party provider identities to internal users.

    Every public method is one transaction on ``db_session``. Changes to the
    set of sign-in methods of a user lock that user's row first, so concurrent
    link/unlink calls for different providers cannot both pass the
    "at least one method remains" check.

    Attributes:
        db_session (AsyncSession): SQLAlchemy async session for database operations.
        fernet (Optional[Fernet]): Cipher used to encrypt cached provider
            access tokens. When None, provider tokens are not stored.
    """

    def __init__(self, db_session: AsyncSession, fernet: Optional[Fernet] = None):
        self.db_session = db_session
        self.fernet = fernet
        self.users = UserRepository(db_session)

    def _encrypt(self, access_token: Optional[str]) -> Optional[bytes]:
        if self.fernet is None or not access_token:
            return None
        return self.fernet.encrypt(access_token.encode())

    def _refresh_cached_profile(self, account: OAuthAccount, profile: ProviderProfile) -> None:
        account.provider_email = profile.email
        account.provider_name = profile.name
        account.provider_avatar = profile.avatar_url
        encrypted = self._encrypt(profile.access_token)
        if encrypted is not None:
            account.access_token = encrypted
        account.updated_at = utcnow()
        self.db_session.add(account)

    def _new_account(self, user_id: int, provider: Provider, profile: ProviderProfile) -> OAuthAccount:
        return OAuthAccount(
            user_id=user_id,
            provider=provider,
            provider_account_id=profile.account_id,
            provider_email=profile.email,
            provider_name=profile.name,
            provider_avatar=profile.avatar_url,
            access_token=self._encrypt(profile.access_token),
        )

    async def _account_for(self, provider: Provider, account_id: str) -> Optional[OAuthAccount]:
        result = await self.db_session.execute(
            select(OAuthAccount).where(
                OAuthAccount.provider == provider,
                OAuthAccount.provider_account_id == account_id,
            )
        )
        return result.scalars().first()

    async def _user_account_for(self, user_id: int, provider: Provider) -> Optional[OAuthAccount]:
        result = await self.db_session.execute(
            select(OAuthAccount).where(
                OAuthAccount.user_id == user_id,
                OAuthAccount.provider == provider,
            )
        )
        return result.scalars().first()

    async def find_or_create_user_from_profile(self, provider: Provider, profile: ProviderProfile) -> User:
        """
        Resolve the internal user for a provider sign-in.

        Resolution order: an existing link for ``(provider, account_id)``; then
        a user whose email matches the provider's *verified* email, which is
        auto-linked; otherwise a new user and account are created together.

        Args:
            provider (Provider): The provider that authenticated the caller.
            profile (ProviderProfile): Profile returned by the code exchange.

        Returns:
            User: The resolved, active user.

        Raises:
            UnauthenticatedError: If the resolved user is deactivated.
            ConflictError: If the email belongs to an existing user but the
                provider has not verified it, or that user already links a
                different account of the same provider.
            ValidationError: If no user exists and the provider shared no email.
        """
        try:
            user = await self._find_or_create(provider, profile)
            await self.db_session.commit()
            return user
        except IntegrityError:
            # Lost a first-login race; the winner's rows are now visible.
            await self.db_session.rollback()
            await logger.awarning("Concurrent OAuth first login detected", provider=provider.value)
            account = await self._account_for(provider, profile.account_id)
            user = await self.db_session.get(User, account.user_id) if account else None
            await self.db_session.commit()
            if user is None:
                raise ConflictError("Could not link this account, please retry")
            if not user.is_active:
                raise UnauthenticatedError("User account is inactive")
            return user
        except BaseException:
            await self.db_session.rollback()
            raise

    async def _find_or_create(self, provider: Provider, profile: ProviderProfile) -> User:
        account = await self._account_for(provider, profile.account_id)
        if account is not None:
            user = await self.db_session.get(User, account.user_id)
            if user is None or not user.is_active:
                await logger.awarning("Inactive user OAuth login", provider=provider.value, user_id=account.user_id)
                raise UnauthenticatedError("User account is inactive")
            self._refresh_cached_profile(account, profile)
            await logger.ainfo("OAuth login", provider=provider.value, user_id=user.id)
            return user

        if not profile.email:
            raise ValidationError(f"{provider.value} did not share an email address")

        user = await self.users.get_by_email(profile.email)
        if user is not None:
            if profile.verified_email is None:
                await logger.awarning(
                    "Refusing OAuth auto-link on unverified email", provider=provider.value, user_id=user.id
                )
                raise ConflictError(
                    "An account with this email already exists. Sign in and link this provider instead."
                )
            if not user.is_active:
                raise UnauthenticatedError("User account is inactive")
            if await self._user_account_for(user.id, provider) is not None:
                raise ConflictError(f"A different {provider.value} account is already linked to this user")
            self.db_session.add(self._new_account(user.id, provider, profile))
            await self.db_session.flush()
            await logger.ainfo("Auto-linked OAuth account by verified email", provider=provider.value, user_id=user.id)
            return user

        user = await self.users.add(
            User(
                email=profile.email,
                name=profile.name or profile.email.split("@")[0],
                avatar_url=profile.avatar_url,
                role=Role.USER,
                is_active=True,
            )
        )
        self.db_session.add(self._new_account(user.id, provider, profile))
        await self.db_session.flush()
        await logger.ainfo("Created new user from OAuth", provider=provider.value, user_id=user.id)
        return user

    async def get_linked_accounts(self, user_id: int) -> List[LinkedAccount]:
        """Providers linked to ``user_id``, ordered by link time."""
        result = await self.db_session.execute(
            select(OAuthAccount)
            .where(OAuthAccount.user_id == user_id)
            .order_by(OAuthAccount.created_at, OAuthAccount.id)
        )
        accounts = list(result.scalars().all())
        await self.db_session.commit()
        return [LinkedAccount(provider=a.provider, linked_at=a.created_at) for a in accounts]

    async def link_account(self, user_id: int, provider: Provider, profile: ProviderProfile) -> OAuthAccount:
        """
        Link a provider identity to an already authenticated user.

        Linking an identity the user already owns refreshes the cached profile
        and is otherwise a no-op.

        Raises:
            NotFoundError: If the user does not exist.
            AlreadyLinkedToAnotherUserError: If the identity belongs to someone else.
            ConflictError: If the user already links another account of this provider.
        """
        try:
            user = await self.users.get_by_id_for_update(user_id)
            if user is None:
                raise NotFoundError("User not found")

            account = await self._account_for(provider, profile.account_id)
            if account is not None:
                if account.user_id != user_id:
                    await logger.awarning(
                        "OAuth account already linked to another user", provider=provider.value, user_id=user_id
                    )
                    raise AlreadyLinkedToAnotherUserError()
                self._refresh_cached_profile(account, profile)
                await self.db_session.commit()
                return account

            if await self._user_account_for(user_id, provider) is not None:
                raise ConflictError(f"A different {provider.value} account is already linked to this user")

            account = self._new_account(user_id, provider, profile)
            self.db_session.add(account)
            await self.db_session.commit()
        except IntegrityError:
            await self.db_session.rollback()
            raise AlreadyLinkedToAnotherUserError()
        except BaseException:
            await self.db_session.rollback()
            raise

        await logger.ainfo("Linked OAuth account", provider=provider.value, user_id=user_id)
        return account

    async def unlink_account(self, user_id: int, provider: Provider) -> None:
        """
        Remove the user's link to ``provider``.

        The user row is locked before the remaining sign-in methods are
        counted, so the check and the delete form one atomic step.

        Raises:
            NotFoundError: If the user has no link for this provider.
            CannotUnlinkLastMethodError: If the user has no password and this is
                their only linked provider. Nothing is changed.
        """
        try:
            user = await self.users.get_by_id_for_update(user_id)
            if user is None:
                raise NotFoundError("User not found")

            result = await self.db_session.execute(
                select(OAuthAccount).where(OAuthAccount.user_id == user_id)
            )
            accounts = list(result.scalars().all())
            target = next((a for a in accounts if a.provider == provider), None)
            if target is None:
                raise NotFoundError(f"No {provider.value} account is linked")

            remaining = (len(accounts) - 1) + (1 if user.has_password else 0)
            if remaining < 1:
                await logger.awarning("Refused to unlink last sign-in method", provider=provider.value, user_id=user_id)
                raise CannotUnlinkLastMethodError()

            await self.db_session.delete(target)
            await self.db_session.commit()
        except BaseException:
            await self.db_session.rollback()
            raise

        await logger.ainfo("Unlinked OAuth account", provider=provider.value, user_id=user_id)
