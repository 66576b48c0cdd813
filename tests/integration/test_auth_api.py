import pytest

from tests.factories.user import DEFAULT_PASSWORD, create_fake_user
from tests.integration.conftest import API

pytestmark = pytest.mark.integration


@pytest.mark.asyncio
async def test_register_starts_browser_session(async_client):
    response = await async_client.post(
        f"{API}/auth/register",
        json={"email": "New@Example.com", "password": DEFAULT_PASSWORD, "name": "New User"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["data"]["email"] == "new@example.com"
    assert body["data"]["role"] == "user"
    assert "hashedPassword" not in body["data"]

    me = await async_client.get(f"{API}/auth/me")
    assert me.status_code == 200
    assert me.json()["data"]["email"] == "new@example.com"


@pytest.mark.asyncio
async def test_register_duplicate_email(async_client, db_session):
    await create_fake_user(db_session, email="taken@example.com")

    response = await async_client.post(
        f"{API}/auth/register",
        json={"email": "taken@example.com", "password": DEFAULT_PASSWORD, "name": "Dup"},
    )

    assert response.status_code == 409
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_register_validation_errors_are_400(async_client):
    response = await async_client.post(
        f"{API}/auth/register",
        json={"email": "short@example.com", "password": "tiny7", "name": "Short"},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "password" in body["error"]
    assert "tiny7" not in body["error"]


@pytest.mark.asyncio
async def test_login_and_logout(async_client, db_session):
    user = await create_fake_user(db_session)

    login = await async_client.post(f"{API}/auth/login", json={"email": user.email, "password": DEFAULT_PASSWORD})
    assert login.status_code == 200
    assert (await async_client.get(f"{API}/auth/me")).status_code == 200

    logout = await async_client.post(f"{API}/auth/logout")
    assert logout.status_code == 200
    assert (await async_client.get(f"{API}/auth/me")).status_code == 401


@pytest.mark.asyncio
async def test_wrong_password(async_client, db_session):
    user = await create_fake_user(db_session)

    response = await async_client.post(f"{API}/auth/login", json={"email": user.email, "password": "nope-nope"})

    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Invalid email or password"}
    assert response.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_anonymous_me_is_401(async_client):
    response = await async_client.get(f"{API}/auth/me")
    assert response.status_code == 401
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_invalid_bearer_is_not_rescued_by_cookie(async_client, db_session):
    user = await create_fake_user(db_session)
    await async_client.post(f"{API}/auth/login", json={"email": user.email, "password": DEFAULT_PASSWORD})

    response = await async_client.get(f"{API}/auth/me", headers={"Authorization": "Bearer sess_forged"})

    assert response.status_code == 401
    assert (await async_client.get(f"{API}/auth/me")).status_code == 200


@pytest.mark.asyncio
async def test_deactivated_user_browser_session_is_rejected(async_client, db_session):
    user = await create_fake_user(db_session)
    await async_client.post(f"{API}/auth/login", json={"email": user.email, "password": DEFAULT_PASSWORD})

    user.is_active = False
    db_session.add(user)
    await db_session.commit()

    assert (await async_client.get(f"{API}/auth/me")).status_code == 401


@pytest.mark.asyncio
async def test_logout_all_revokes_bearer_sessions(async_client, db_session, login_mobile):
    user = await create_fake_user(db_session)
    phone = await login_mobile(user, deviceType="ios")
    tablet = await login_mobile(user, deviceType="android")

    response = await async_client.post(f"{API}/auth/logout-all", headers=phone)

    assert response.status_code == 200
    assert response.json()["data"]["revoked"] == 2
    assert (await async_client.get(f"{API}/auth/me", headers=tablet)).status_code == 401


@pytest.mark.asyncio
async def test_request_id_is_echoed(async_client):
    response = await async_client.get(f"{API}/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["x-request-id"] == "req-123"


@pytest.mark.asyncio
async def test_health(async_client):
    response = await async_client.get(f"{API}/health")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "ok"
    assert data["env"] == "test"
    assert data["services"]["database"]["status"] == "healthy"


@pytest.mark.asyncio
async def test_unknown_route_uses_error_envelope(async_client):
    response = await async_client.get(f"{API}/nope")
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Not Found"}
