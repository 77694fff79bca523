from .analytics_service import AnalyticsService
from .attachment_service import AttachmentService
from .clear_data_service import ClearDataService
from .profile_service import ProfileService
from .realtime_hub import RealtimeHub
from .recommendation_service import RecommendationService
from .record_service import RecordService
from .weather_sync_service import WeatherSyncService

__all__ = [
    "AnalyticsService",
    "AttachmentService",
    "ClearDataService",
    "ProfileService",
    "RealtimeHub",
    "RecommendationService",
    "RecordService",
    "WeatherSyncService",
]
