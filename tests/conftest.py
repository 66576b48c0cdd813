import os

# Settings are read at import time, so the environment must be ready first.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-long-enough-for-signing-cookies")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./authcore-test.db")
os.environ.setdefault("BCRYPT_WORK_FACTOR", "4")
os.environ.setdefault("SESSION_SWEEP_INTERVAL_SECONDS", "0")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("GOOGLE_CLIENT_ID", "google-client-id")
os.environ.setdefault("GOOGLE_CLIENT_SECRET", "google-client-secret")
os.environ.setdefault("GITHUB_CLIENT_ID", "github-client-id")
os.environ.setdefault("GITHUB_CLIENT_SECRET", "github-client-secret")

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.core.application import create_application
from src.domain.entities.session import DeviceType
from src.domain.value_objects.device_info import DeviceInfo
from src.infrastructure.database.async_db import Database
from src.infrastructure.services.authentication.oauth import OAuthProviderClient
from src.permissions.rbac import AccessControlEvaluator
from tests.factories.oauth import FakeProviderServer


@pytest_asyncio.fixture
async def database(tmp_path):
    """A fresh SQLite store per test, schema created."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'authcore.db'}")
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    async with database.session() as session:
        yield session


@pytest.fixture
def provider_server():
    """In-memory Google/GitHub endpoints behind an httpx.MockTransport."""
    return FakeProviderServer()


@pytest.fixture
def oauth_client(provider_server):
    return OAuthProviderClient(transport=httpx.MockTransport(provider_server.handle))


@pytest.fixture
def app(database, oauth_client):
    return create_application(database=database, oauth_client=oauth_client)


@pytest_asyncio.fixture
async def async_client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture(scope="session")
def access_control():
    return AccessControlEvaluator()


@pytest.fixture
def web_device():
    return DeviceInfo(device_type=DeviceType.WEB, user_agent="Mozilla/5.0", ip_address="10.0.0.1")


@pytest.fixture
def mobile_device():
    return DeviceInfo(device_type=DeviceType.IOS, device_name="Test iPhone", user_agent="AuthCoreApp/1.0")
