from .chat_message import ChatMessage, ChatCompletionResult, TokenUsage
from .change_event import ChangeEvent, ChangeOperation
from .clear_report import ClearDataReport, TableClearResult
from .profile import Profile
from .recommendation import CropRecommendation, RecommendationRequest
from .record import ResourceRecord
from .resource import (
    CLEARABLE_TABLES,
    RESOURCE_SPECS,
    SYSTEM_FIELDS,
    FieldSpec,
    FieldType,
    ResourceName,
    ResourceSpec,
    get_resource_spec,
)
from .weather import WeatherObservation, WeatherReport

__all__ = [
    "ChatMessage",
    "ChatCompletionResult",
    "TokenUsage",
    "ChangeEvent",
    "ChangeOperation",
    "ClearDataReport",
    "TableClearResult",
    "Profile",
    "CropRecommendation",
    "RecommendationRequest",
    "ResourceRecord",
    "CLEARABLE_TABLES",
    "RESOURCE_SPECS",
    "SYSTEM_FIELDS",
    "FieldSpec",
    "FieldType",
    "ResourceName",
    "ResourceSpec",
    "get_resource_spec",
    "WeatherObservation",
    "WeatherReport",
]
