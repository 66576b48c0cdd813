from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from src.core.exceptions import InvalidCredentialsError, UserAlreadyExistsError, ValidationError
from src.domain.entities.user import Role, User
from src.infrastructure.repositories.user_repository import UserRepository
from src.utils.security import dummy_password_hash, hash_password, verify_password

logger = get_logger(__name__)


class UserAuthenticationService:
    """
    Service for handling email/password authentication and user registration.

    Passwords are hashed with bcrypt. Unknown emails, wrong passwords and
    inactive accounts all fail with the same generic error, and unknown emails
    still pay for one bcrypt check so timing does not reveal which case hit.

    Attributes:
        db_session (AsyncSession): SQLAlchemy async session for database operations.
    """

    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session
        self.users = UserRepository(db_session)

    async def authenticate_by_credentials(self, email: str, password: str) -> User:
        """
        Authenticate a user using email and password.

        Args:
            email (str): User's email address.
            password (str): User's password.

        Returns:
            User: Authenticated user entity.

        Raises:
            InvalidCredentialsError: If credentials are invalid or the user is inactive.
        """
        user = await self.users.get_by_email(email)
        await self.db_session.commit()

        if user is None or user.hashed_password is None:
            verify_password(password, dummy_password_hash())
            await logger.awarning("Invalid credentials", reason="unknown_user_or_no_password")
            raise InvalidCredentialsError()

        if not verify_password(password, user.hashed_password):
            await logger.awarning("Invalid credentials", user_id=user.id, reason="bad_password")
            raise InvalidCredentialsError()

        if not user.is_active:
            await logger.awarning("Authentication attempt for inactive user", user_id=user.id)
            raise InvalidCredentialsError()

        return user

    async def register_user(self, email: str, password: str, name: str) -> User:
        """
        Register a new password user.

        Args:
            email (str): Unique email address for the new user.
            password (str): Plain text password, at most 72 bytes.
            name (str): Display name.

        Returns:
            User: The newly created user entity.

        Raises:
            UserAlreadyExistsError: If the email is already registered.
            ValidationError: If the password cannot be hashed.
        """
        try:
            hashed = hash_password(password)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        try:
            if await self.users.get_by_email(email) is not None:
                raise UserAlreadyExistsError()
            user = await self.users.add(
                User(email=email, hashed_password=hashed, name=name, role=Role.USER, is_active=True)
            )
            await self.db_session.commit()
        except IntegrityError as e:
            await self.db_session.rollback()
            raise UserAlreadyExistsError() from e
        except BaseException:
            await self.db_session.rollback()
            raise

        await logger.ainfo("User registered", user_id=user.id)
        return user
