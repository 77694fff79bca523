"""Fixtures for API tests: a throwaway SQLite database behind the real app."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from farmdesk.application.services import RealtimeHub
from farmdesk.config import get_settings
from farmdesk.infrastructure.auth import issue_access_token
from farmdesk.infrastructure.database import Base, get_session_factory
from farmdesk.infrastructure.dependencies import get_blob_storage, get_realtime_hub
from farmdesk.infrastructure.storage.local_file_storage import LocalFileStorage
from farmdesk.main import create_app


def auth_headers(user_id: str) -> dict[str, str]:
    settings = get_settings()
    token = issue_access_token(user_id, settings.jwt_secret, settings.jwt_algorithm)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for():
    return auth_headers


@pytest.fixture
def alice() -> dict[str, str]:
    return auth_headers("user-a")


@pytest.fixture
def bob() -> dict[str, str]:
    return auth_headers("user-b")


@pytest.fixture
def hub() -> RealtimeHub:
    return RealtimeHub()


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'farmdesk.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def app(session_factory, hub, tmp_path):
    application = create_app()
    storage = LocalFileStorage(upload_dir=str(tmp_path / "uploads"))
    application.dependency_overrides[get_session_factory] = lambda: session_factory
    application.dependency_overrides[get_realtime_hub] = lambda: hub
    application.dependency_overrides[get_blob_storage] = lambda: storage
    return application


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http:
        yield http
