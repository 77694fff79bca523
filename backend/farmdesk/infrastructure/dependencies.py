"""FastAPI dependency injection — wires infrastructure to application layer."""

from collections.abc import AsyncGenerator
from functools import lru_cache

from fastapi import Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from farmdesk.application.interfaces import BlobStorage, ChatProvider, WeatherProvider
from farmdesk.application.services import (
    AnalyticsService,
    AttachmentService,
    ClearDataService,
    ProfileService,
    RealtimeHub,
    RecommendationService,
    RecordService,
    WeatherSyncService,
)
from farmdesk.config import get_settings
from farmdesk.domain.entities import ResourceName
from farmdesk.infrastructure.database.repositories import (
    SQLAlchemyProfileRepository,
    SQLAlchemyRecordRepository,
)
from farmdesk.infrastructure.database.session import (
    get_db_session,
    get_session_factory,
    make_profile_scope,
    make_repository_scope,
)
from farmdesk.infrastructure.openrouter import OpenRouterClient
from farmdesk.infrastructure.storage.local_file_storage import LocalFileStorage
from farmdesk.infrastructure.weather import WeatherApiClient


@lru_cache
def get_realtime_hub() -> RealtimeHub:
    """Process-wide change feed hub."""
    return RealtimeHub(queue_size=get_settings().realtime_queue_size)


@lru_cache
def get_blob_storage() -> BlobStorage:
    return LocalFileStorage(upload_dir=get_settings().upload_dir)


def get_chat_provider() -> ChatProvider | None:
    """OpenRouter when an API key is configured, otherwise None."""
    settings = get_settings()
    if not settings.openrouter_api_key.strip():
        return None
    return OpenRouterClient(
        api_key=settings.openrouter_api_key,
        base_url=settings.openrouter_base_url,
        app_name=settings.openrouter_app_name,
    )


def get_weather_provider() -> WeatherProvider | None:
    settings = get_settings()
    if not settings.weather_api_key.strip():
        return None
    return WeatherApiClient(
        api_key=settings.weather_api_key,
        base_url=settings.weather_base_url,
    )


def _record_service(
    session: AsyncSession, resource: ResourceName, hub: RealtimeHub
) -> RecordService:
    """RecordService committing through ``session``; crop writes refresh analytics."""
    repository = SQLAlchemyRecordRepository(session, resource)
    analytics = None
    if resource is ResourceName.CROPS:
        analytics = AnalyticsService(
            crops_repository=repository,
            analytics_repository=SQLAlchemyRecordRepository(
                session, ResourceName.CROP_ANALYTICS
            ),
        )
    return RecordService(repository, hub=hub, analytics=analytics, commit=session.commit)


def get_resource_name(resource: str) -> ResourceName:
    """Resolve the ``{resource}`` path segment; unknown tables answer 404."""
    try:
        return ResourceName(resource)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown resource '{resource}'") from None


async def get_record_service(
    resource: ResourceName = Depends(get_resource_name),
    session: AsyncSession = Depends(get_db_session),
    hub: RealtimeHub = Depends(get_realtime_hub),
) -> AsyncGenerator[RecordService, None]:
    """Provides a RecordService for the table named in the path."""
    yield _record_service(session, resource, hub)


async def get_profile_service(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[ProfileService, None]:
    yield ProfileService(SQLAlchemyProfileRepository(session))


async def get_attachment_service(
    session: AsyncSession = Depends(get_db_session),
    hub: RealtimeHub = Depends(get_realtime_hub),
    storage: BlobStorage = Depends(get_blob_storage),
) -> AsyncGenerator[AttachmentService, None]:
    """Provides an AttachmentService over local storage and ``crop_attachments``."""
    settings = get_settings()
    yield AttachmentService(
        records=_record_service(session, ResourceName.CROP_ATTACHMENTS, hub),
        storage=storage,
        max_size_bytes=settings.max_upload_size_mb * 1024 * 1024,
    )


async def get_recommendation_service(
    session: AsyncSession = Depends(get_db_session),
    hub: RealtimeHub = Depends(get_realtime_hub),
    chat_provider: ChatProvider | None = Depends(get_chat_provider),
    weather_provider: WeatherProvider | None = Depends(get_weather_provider),
) -> AsyncGenerator[RecommendationService, None]:
    """Provides the crop recommendation generator; works without a weather key."""
    settings = get_settings()
    yield RecommendationService(
        records=_record_service(session, ResourceName.CROP_RECOMMENDATIONS, hub),
        chat_provider=chat_provider,
        model=settings.recommendation_model,
        weather_provider=weather_provider,
    )


async def get_weather_sync_service(
    session: AsyncSession = Depends(get_db_session),
    hub: RealtimeHub = Depends(get_realtime_hub),
    weather_provider: WeatherProvider | None = Depends(get_weather_provider),
) -> AsyncGenerator[WeatherSyncService, None]:
    settings = get_settings()
    yield WeatherSyncService(
        provider=weather_provider,
        records=_record_service(session, ResourceName.WEATHER_DATA, hub),
        forecast_days=settings.weather_forecast_days,
    )


async def get_clear_data_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    hub: RealtimeHub = Depends(get_realtime_hub),
    storage: BlobStorage = Depends(get_blob_storage),
) -> AsyncGenerator[ClearDataService, None]:
    """Provides the bulk clear; every table gets its own session and transaction."""
    yield ClearDataService(
        repository_scope=make_repository_scope(session_factory),
        profile_scope=make_profile_scope(session_factory),
        hub=hub,
        blob_storage=storage,
    )
