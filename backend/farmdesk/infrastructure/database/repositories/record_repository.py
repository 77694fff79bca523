"""Concrete repository implementation for resource records backed by SQLAlchemy."""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from farmdesk.application.interfaces import RecordRepository
from farmdesk.domain.entities import ResourceName, ResourceRecord
from farmdesk.infrastructure.database.models import RECORD_MODELS, RecordColumnsMixin


def _aware(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; everything we store is UTC."""
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


class SQLAlchemyRecordRepository(RecordRepository):
    """Implements the RecordRepository port for one resource table."""

    def __init__(self, session: AsyncSession, resource: ResourceName):
        self._session = session
        self._resource = resource
        self._model: Any = RECORD_MODELS[resource]

    @property
    def resource(self) -> ResourceName:
        return self._resource

    def _to_entity(self, model: RecordColumnsMixin) -> ResourceRecord:
        """Map ORM model → domain entity."""
        return ResourceRecord(
            id=model.id,
            resource=self._resource.value,
            user_id=model.user_id,
            data=dict(model.data or {}),
            created_at=_aware(model.created_at),
            updated_at=_aware(model.updated_at),
        )

    def _to_model(self, entity: ResourceRecord) -> RecordColumnsMixin:
        """Map domain entity → ORM model (for creation)."""
        return self._model(
            id=entity.id,
            user_id=entity.user_id,
            data=dict(entity.data),
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    def _field_equals(self, name: str, value: Any):
        """Equality on one JSON field, compared with the value's own type."""
        column = self._model.data[name]
        if isinstance(value, bool):
            return column.as_boolean() == value
        if isinstance(value, int):
            return column.as_integer() == value
        if isinstance(value, float):
            return column.as_float() == value
        return column.as_string() == str(value)

    async def list_for_owner(
        self,
        user_id: str,
        *,
        filters: dict[str, Any] | None = None,
        skip: int = 0,
        limit: int | None = 100,
    ) -> list[ResourceRecord]:
        stmt = select(self._model).where(self._model.user_id == user_id)

        for name, value in (filters or {}).items():
            stmt = stmt.where(self._field_equals(name, value))

        stmt = stmt.order_by(self._model.created_at.desc()).offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._session.execute(stmt)
        return [self._to_entity(row) for row in result.scalars().all()]

    async def get_for_owner(self, user_id: str, record_id: str) -> ResourceRecord | None:
        model = await self._session.get(self._model, record_id)
        if model is None or model.user_id != user_id:
            return None
        return self._to_entity(model)

    async def create(self, record: ResourceRecord) -> ResourceRecord:
        model = self._to_model(record)
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model)

    async def update(self, record: ResourceRecord) -> ResourceRecord:
        model = await self._session.get(self._model, record.id)
        if model is None or model.user_id != record.user_id:
            raise ValueError(f"{self._resource.value} row {record.id} not found in database")
        model.data = dict(record.data)
        model.updated_at = record.updated_at
        await self._session.flush()
        return self._to_entity(model)

    async def delete_for_owner(self, user_id: str, record_id: str) -> bool:
        result = await self._session.execute(
            delete(self._model).where(
                self._model.id == record_id,
                self._model.user_id == user_id,
            )
        )
        return (result.rowcount or 0) > 0

    async def delete_all_for_owner(self, user_id: str) -> int:
        result = await self._session.execute(
            delete(self._model).where(self._model.user_id == user_id)
        )
        return result.rowcount or 0
