"""SQLAlchemy database session and engine configuration."""

from collections.abc import AsyncGenerator, AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from farmdesk.config import get_settings
from farmdesk.domain.entities import ResourceName


def _get_async_url(url: str) -> str:
    """Convert a sync SQLAlchemy URL to an async one."""
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


settings = get_settings()
_async_url = _get_async_url(settings.database_url)

engine = create_async_engine(
    _async_url,
    echo=(settings.app_env == "development"),
    future=True,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """FastAPI dependency — the session factory (overridden in tests)."""
    return async_session_factory


async def get_db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency — yields an async DB session per request."""
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def make_repository_scope(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[[ResourceName], AbstractAsyncContextManager]:
    """Build a RepositoryScope: one session + transaction per opened repository."""
    from farmdesk.infrastructure.database.repositories import SQLAlchemyRecordRepository

    @asynccontextmanager
    async def scope(resource: ResourceName) -> AsyncIterator[SQLAlchemyRecordRepository]:
        async with session_factory() as session:
            try:
                yield SQLAlchemyRecordRepository(session, resource)
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    return scope


def make_profile_scope(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[[], AbstractAsyncContextManager]:
    """Build a ProfileRepositoryScope with its own session + transaction."""
    from farmdesk.infrastructure.database.repositories import SQLAlchemyProfileRepository

    @asynccontextmanager
    async def scope() -> AsyncIterator[SQLAlchemyProfileRepository]:
        async with session_factory() as session:
            try:
                yield SQLAlchemyProfileRepository(session)
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    return scope
