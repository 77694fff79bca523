"""Concrete repository implementation for profiles backed by SQLAlchemy."""

from datetime import timezone

from sqlalchemy.ext.asyncio import AsyncSession

from farmdesk.application.interfaces import ProfileRepository
from farmdesk.domain.entities import Profile
from farmdesk.infrastructure.database.models import ProfileModel

_COLUMNS = (
    "full_name",
    "username",
    "avatar_url",
    "farm_name",
    "phone",
    "location",
    "bio",
    "preferences",
    "notifications",
    "privacy",
)


class SQLAlchemyProfileRepository(ProfileRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    def _to_entity(self, model: ProfileModel) -> Profile:
        created_at = model.created_at
        updated_at = model.updated_at
        return Profile(
            id=model.id,
            **{column: getattr(model, column) for column in _COLUMNS},
            created_at=created_at if created_at.tzinfo else created_at.replace(tzinfo=timezone.utc),
            updated_at=updated_at if updated_at.tzinfo else updated_at.replace(tzinfo=timezone.utc),
        )

    async def get(self, user_id: str) -> Profile | None:
        model = await self._session.get(ProfileModel, user_id)
        return self._to_entity(model) if model else None

    async def save(self, profile: Profile) -> Profile:
        model = await self._session.get(ProfileModel, profile.id)
        if model is None:
            model = ProfileModel(id=profile.id, created_at=profile.created_at)
            self._session.add(model)
        for column in _COLUMNS:
            value = getattr(profile, column)
            setattr(model, column, dict(value) if isinstance(value, dict) else value)
        model.updated_at = profile.updated_at
        await self._session.flush()
        return self._to_entity(model)
