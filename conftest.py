import os
from typing import AsyncGenerator

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Load .env.test for local overrides (SMTP sandbox, etc.) if present
from dotenv import load_dotenv

env_test_path = os.path.join(os.path.dirname(__file__), ".env.test")
if os.path.exists(env_test_path):
    load_dotenv(env_test_path)

# Tests always run against an in-memory database with offline credentials.
os.environ.update(
    {
        "ENVIRONMENT": "test",
        "DATABASE_URL": "sqlite+aiosqlite:///:memory:",
        "JWT_SECRET": "test-secret",
        "BCRYPT_ROUNDS": "4",
        "RAZORPAY_KEY_ID": "rzp_test_key",
        "RAZORPAY_KEY_SECRET": "rzp_test_secret",
        "CLOUDINARY_CLOUD_NAME": "test-cloud",
        "CLOUDINARY_API_KEY": "test-api-key",
        "CLOUDINARY_API_SECRET": "test-api-secret",
        "SMTP_USERNAME": "",
        "SMTP_PASSWORD": "",
        "RATE_LIMIT_ENABLED": "false",
    }
)

from libs.common.config import get_settings

# Clear cached settings to reload with new env vars
get_settings.cache_clear()
settings = get_settings()

from libs.common import service_client
from libs.db.base import Base
from libs.db.session import get_async_db
from services.events_service.app.main import app as events_app
from services.gateway_service.app.main import app
from services.matrimony_service.app.main import app as matrimony_app
from services.media_service.app.main import app as media_app
from services.members_service.app.main import app as members_app
from services.payments_service.app.main import app as payments_app

# Import all models so metadata includes every table
from services.events_service import models as _event_models  # noqa: F401
from services.matrimony_service import models as _matrimony_models  # noqa: F401
from services.media_service import models as _media_models  # noqa: F401
from services.members_service import models as _member_models  # noqa: F401
from services.payments_service import models as _payment_models  # noqa: F401

SERVICE_APPS = {
    "members": members_app,
    "matrimony": matrimony_app,
    "payments": payments_app,
    "media": media_app,
    "events": events_app,
}


class InAppServiceClient(service_client.ServiceClient):
    """Routes service-to-service calls to an in-process FastAPI app."""

    def __init__(self, target_app):
        super().__init__(base_url="http://test")
        self.target_app = target_app

    async def _request(self, method: str, path: str, **kwargs):
        async with AsyncClient(
            transport=ASGITransport(app=self.target_app), base_url="http://test"
        ) as internal_client:
            return await internal_client.request(method, path, **kwargs)


@pytest_asyncio.fixture
async def test_engine():
    """
    Fresh in-memory database per test.

    StaticPool keeps the single SQLite connection alive for the engine's
    lifetime so every session sees the same tables.
    """
    engine = create_async_engine(
        settings.DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    Yield the session every service app uses during the test.
    Attributes stay loaded after commit, as with the services' own sessions.
    """
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def service_apps(db_session):
    """
    Wire every service app to the test session and route the shared
    service clients to the in-process apps instead of external URLs.
    """
    for service_app in SERVICE_APPS.values():
        service_app.dependency_overrides[get_async_db] = lambda: db_session

    originals = {
        name: getattr(service_client, f"{name}_client") for name in SERVICE_APPS
    }
    for name, service_app in SERVICE_APPS.items():
        setattr(service_client, f"{name}_client", InAppServiceClient(service_app))

    yield SERVICE_APPS

    for name, original in originals.items():
        setattr(service_client, f"{name}_client", original)
    for service_app in SERVICE_APPS.values():
        service_app.dependency_overrides.clear()


def _client_for(target_app) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=target_app), base_url="http://test")


@pytest_asyncio.fixture
async def client(service_apps) -> AsyncGenerator[AsyncClient, None]:
    """
    Yield an AsyncClient talking to the gateway, with every service in-process.
    """
    async with _client_for(app) as ac:
        yield ac


@pytest_asyncio.fixture
async def members_client(service_apps) -> AsyncGenerator[AsyncClient, None]:
    async with _client_for(members_app) as ac:
        yield ac


@pytest_asyncio.fixture
async def matrimony_client(service_apps) -> AsyncGenerator[AsyncClient, None]:
    async with _client_for(matrimony_app) as ac:
        yield ac


@pytest_asyncio.fixture
async def payments_client(service_apps) -> AsyncGenerator[AsyncClient, None]:
    async with _client_for(payments_app) as ac:
        yield ac


@pytest_asyncio.fixture
async def media_client(service_apps) -> AsyncGenerator[AsyncClient, None]:
    async with _client_for(media_app) as ac:
        yield ac


@pytest_asyncio.fixture
async def events_client(service_apps) -> AsyncGenerator[AsyncClient, None]:
    async with _client_for(events_app) as ac:
        yield ac
