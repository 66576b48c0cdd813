import pytest

from tests.factories.user import DEFAULT_PASSWORD

API = "/api/v1"


@pytest.fixture
def login_mobile(async_client):
    """Returns a coroutine that logs ``user`` in and yields bearer headers."""

    async def _login(user, password=DEFAULT_PASSWORD, **device):
        response = await async_client.post(
            f"{API}/auth/mobile/login",
            json={"email": user.email, "password": password, **device},
        )
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['data']['sessionToken']}"}

    return _login
