from .functions import (
    ClearDataResponse,
    FunctionErrorResponse,
    RecommendationRequestSchema,
    RecommendationResponse,
    RecommendationSchema,
    TableClearResultSchema,
    WeatherSyncRequest,
    WeatherSyncResponse,
)
from .profile import ProfileResponse, ProfileUpdate, SettingsSchema, SettingsUpdate
from .records import parse_filters, validate_insert, validate_patch

__all__ = [
    "ClearDataResponse",
    "FunctionErrorResponse",
    "RecommendationRequestSchema",
    "RecommendationResponse",
    "RecommendationSchema",
    "TableClearResultSchema",
    "WeatherSyncRequest",
    "WeatherSyncResponse",
    "ProfileResponse",
    "ProfileUpdate",
    "SettingsSchema",
    "SettingsUpdate",
    "parse_filters",
    "validate_insert",
    "validate_patch",
]
