import pytest

from src.core.exceptions import InvalidCredentialsError, UserAlreadyExistsError, ValidationError
from src.domain.entities.user import Role
from src.domain.services.auth.user_authentication import UserAuthenticationService
from src.utils.security import verify_password
from tests.factories.user import DEFAULT_PASSWORD, create_fake_user


@pytest.mark.asyncio
async def test_register_user(db_session):
    service = UserAuthenticationService(db_session)

    user = await service.register_user("New.User@Example.com", DEFAULT_PASSWORD, "New User")

    assert user.id is not None
    assert user.email == "new.user@example.com"
    assert user.role is Role.USER
    assert verify_password(DEFAULT_PASSWORD, user.hashed_password)


@pytest.mark.asyncio
async def test_register_duplicate_email_case_insensitive(db_session):
    await create_fake_user(db_session, email="taken@example.com")

    with pytest.raises(UserAlreadyExistsError):
        await UserAuthenticationService(db_session).register_user("TAKEN@example.com", DEFAULT_PASSWORD, "Dup")


@pytest.mark.asyncio
async def test_register_rejects_overlong_password(db_session):
    with pytest.raises(ValidationError):
        await UserAuthenticationService(db_session).register_user("long@example.com", "x" * 73, "Long")


@pytest.mark.asyncio
async def test_authenticate_by_credentials(db_session):
    created = await create_fake_user(db_session, email="jane@example.com")

    user = await UserAuthenticationService(db_session).authenticate_by_credentials("Jane@Example.com", DEFAULT_PASSWORD)

    assert user.id == created.id


@pytest.mark.asyncio
async def test_unknown_email_wrong_password_and_inactive_fail_alike(db_session):
    await create_fake_user(db_session, email="jane@example.com")
    await create_fake_user(db_session, email="gone@example.com", is_active=False)
    await create_fake_user(db_session, email="oauth@example.com", password=None)
    service = UserAuthenticationService(db_session)

    messages = set()
    for email, password in [
        ("nobody@example.com", DEFAULT_PASSWORD),
        ("jane@example.com", "wrong-password"),
        ("gone@example.com", DEFAULT_PASSWORD),
        ("oauth@example.com", DEFAULT_PASSWORD),
    ]:
        with pytest.raises(InvalidCredentialsError) as exc:
            await service.authenticate_by_credentials(email, password)
        messages.add(str(exc.value))

    assert messages == {"Invalid email or password"}
