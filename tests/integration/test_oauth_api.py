import pytest

from tests.factories.user import create_fake_user
from tests.integration.conftest import API

pytestmark = pytest.mark.integration

REDIRECT_URI = "http://localhost:3000/oauth/callback"


async def authorize(async_client, provider="google"):
    response = await async_client.get(f"{API}/auth/oauth/{provider}/authorize", params={"redirect_uri": REDIRECT_URI})
    assert response.status_code == 200, response.text
    return response.json()["data"]


@pytest.mark.asyncio
async def test_web_sign_in(async_client, provider_server):
    started = await authorize(async_client)
    assert started["authorizationUrl"].startswith("https://accounts.google.com/")

    response = await async_client.post(
        f"{API}/auth/oauth/google/exchange",
        json={"code": "auth-code", "redirectUri": REDIRECT_URI, "state": started["state"]},
    )

    assert response.status_code == 200, response.text
    data = response.json()["data"]
    assert data["user"]["email"] == provider_server.google_userinfo["email"].lower()
    assert data["sessionToken"] is None
    me = await async_client.get(f"{API}/auth/me")
    assert me.status_code == 200


@pytest.mark.asyncio
async def test_web_sign_in_rejects_wrong_state(async_client, provider_server):
    await authorize(async_client)

    response = await async_client.post(
        f"{API}/auth/oauth/google/exchange",
        json={"code": "auth-code", "redirectUri": REDIRECT_URI, "state": "forged"},
    )

    assert response.status_code == 400
    assert provider_server.requests == []


@pytest.mark.asyncio
async def test_state_is_single_use(async_client):
    started = await authorize(async_client)
    payload = {"code": "auth-code", "redirectUri": REDIRECT_URI, "state": started["state"]}

    assert (await async_client.post(f"{API}/auth/oauth/google/exchange", json=payload)).status_code == 200
    assert (await async_client.post(f"{API}/auth/oauth/google/exchange", json=payload)).status_code == 400


@pytest.mark.asyncio
async def test_mobile_sign_in_returns_bearer_session(async_client):
    response = await async_client.post(
        f"{API}/auth/oauth/github/exchange",
        json={"code": "auth-code", "redirectUri": "app://callback", "client": "mobile", "deviceType": "ios"},
    )

    assert response.status_code == 200, response.text
    data = response.json()["data"]
    assert data["sessionToken"].startswith("sess_")
    headers = {"Authorization": f"Bearer {data['sessionToken']}"}
    accounts = await async_client.get(f"{API}/auth/oauth/accounts", headers=headers)
    assert [a["provider"] for a in accounts.json()["data"]] == ["github"]


@pytest.mark.asyncio
async def test_provider_failure_is_502(async_client, provider_server):
    provider_server.token_status = 400
    provider_server.token_body = {"error": "invalid_grant"}

    response = await async_client.post(
        f"{API}/auth/oauth/github/exchange",
        json={"code": "bad", "redirectUri": "app://callback", "client": "mobile"},
    )

    assert response.status_code == 502
    assert response.json() == {"success": False, "error": "github authentication failed"}


@pytest.mark.asyncio
async def test_unknown_provider_is_400(async_client):
    response = await async_client.get(f"{API}/auth/oauth/myspace/authorize", params={"redirect_uri": REDIRECT_URI})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_unverified_email_of_existing_user_is_409(async_client, db_session, provider_server):
    user = await create_fake_user(db_session)
    provider_server.google_userinfo["email"] = user.email
    provider_server.google_userinfo["verified_email"] = False

    response = await async_client.post(
        f"{API}/auth/oauth/google/exchange",
        json={"code": "auth-code", "redirectUri": "app://callback", "client": "mobile"},
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_link_list_and_unlink(async_client, db_session, login_mobile):
    user = await create_fake_user(db_session)
    headers = await login_mobile(user)

    linked = await async_client.post(
        f"{API}/auth/oauth/github/link",
        json={"code": "auth-code", "redirectUri": REDIRECT_URI},
        headers=headers,
    )
    assert linked.status_code == 201, linked.text
    assert linked.json()["data"]["provider"] == "github"

    accounts = await async_client.get(f"{API}/auth/oauth/accounts", headers=headers)
    assert [a["provider"] for a in accounts.json()["data"]] == ["github"]

    unlinked = await async_client.delete(f"{API}/auth/oauth/github", headers=headers)
    assert unlinked.status_code == 200
    accounts = await async_client.get(f"{API}/auth/oauth/accounts", headers=headers)
    assert accounts.json()["data"] == []


@pytest.mark.asyncio
async def test_browser_link_requires_state(async_client, db_session):
    user = await create_fake_user(db_session)
    await async_client.post(f"{API}/auth/login", json={"email": user.email, "password": "Str0ngP@ssw0rd"})

    response = await async_client.post(
        f"{API}/auth/oauth/github/link",
        json={"code": "auth-code", "redirectUri": REDIRECT_URI},
    )
    assert response.status_code == 400

    started = await authorize(async_client, "github")
    response = await async_client.post(
        f"{API}/auth/oauth/github/link",
        json={"code": "auth-code", "redirectUri": REDIRECT_URI, "state": started["state"]},
    )
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_link_identity_of_another_user_is_409(async_client, db_session, login_mobile):
    alice = await create_fake_user(db_session)
    bob = await create_fake_user(db_session)
    payload = {"code": "auth-code", "redirectUri": REDIRECT_URI}

    first = await async_client.post(f"{API}/auth/oauth/google/link", json=payload, headers=await login_mobile(alice))
    second = await async_client.post(f"{API}/auth/oauth/google/link", json=payload, headers=await login_mobile(bob))

    assert first.status_code == 201
    assert second.status_code == 409


@pytest.mark.asyncio
async def test_cannot_unlink_last_method(async_client):
    signed_in = await async_client.post(
        f"{API}/auth/oauth/google/exchange",
        json={"code": "auth-code", "redirectUri": "app://callback", "client": "mobile"},
    )
    headers = {"Authorization": f"Bearer {signed_in.json()['data']['sessionToken']}"}

    response = await async_client.delete(f"{API}/auth/oauth/google", headers=headers)

    assert response.status_code == 403
    accounts = await async_client.get(f"{API}/auth/oauth/accounts", headers=headers)
    assert [a["provider"] for a in accounts.json()["data"]] == ["google"]


@pytest.mark.asyncio
async def test_oauth_account_endpoints_require_auth(async_client):
    assert (await async_client.get(f"{API}/auth/oauth/accounts")).status_code == 401
    assert (await async_client.delete(f"{API}/auth/oauth/google")).status_code == 401
