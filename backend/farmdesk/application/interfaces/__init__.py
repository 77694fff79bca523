from .blob_storage import BlobStorage, StoredBlob
from .chat_provider import ChatProvider
from .profile_repository import ProfileRepository, ProfileRepositoryScope
from .record_repository import RecordRepository, RepositoryScope
from .weather_provider import WeatherProvider

__all__ = [
    "BlobStorage",
    "StoredBlob",
    "ChatProvider",
    "ProfileRepository",
    "ProfileRepositoryScope",
    "RecordRepository",
    "RepositoryScope",
    "WeatherProvider",
]
