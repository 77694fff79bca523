from .base import Base
from .session import (
    engine,
    async_session_factory,
    get_db_session,
    get_session_factory,
    make_profile_scope,
    make_repository_scope,
)
from .models import ProfileModel, RECORD_MODELS

__all__ = [
    "Base",
    "engine",
    "async_session_factory",
    "get_db_session",
    "get_session_factory",
    "make_profile_scope",
    "make_repository_scope",
    "ProfileModel",
    "RECORD_MODELS",
]
