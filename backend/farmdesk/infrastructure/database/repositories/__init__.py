from .profile_repository import SQLAlchemyProfileRepository
from .record_repository import SQLAlchemyRecordRepository

__all__ = [
    "SQLAlchemyProfileRepository",
    "SQLAlchemyRecordRepository",
]
