"""Application service (use case) for owner-scoped resource records."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from farmdesk.application.interfaces import RecordRepository
from farmdesk.application.schemas.records import validate_insert, validate_patch
from farmdesk.application.services.analytics_service import AnalyticsService
from farmdesk.application.services.realtime_hub import RealtimeHub
from farmdesk.domain.entities import (
    ChangeEvent,
    ChangeOperation,
    ResourceName,
    ResourceRecord,
    ResourceSpec,
    get_resource_spec,
)
from farmdesk.domain.exceptions import NotFoundError

logger = logging.getLogger(__name__)


class RecordService:
    """Orchestrates CRUD for one resource table. Depends on the repository port (DI).

    Mutations are committed through ``commit`` (when given) before their
    change events are published, so a subscriber that re-fetches on an
    event always sees the committed row.
    """

    def __init__(
        self,
        repository: RecordRepository,
        *,
        hub: RealtimeHub | None = None,
        analytics: AnalyticsService | None = None,
        commit: Callable[[], Awaitable[None]] | None = None,
    ):
        self._repository = repository
        self._hub = hub
        self._analytics = analytics
        self._commit = commit

    @property
    def spec(self) -> ResourceSpec:
        return get_resource_spec(self._repository.resource)

    async def list_records(
        self,
        user_id: str,
        *,
        filters: dict[str, Any] | None = None,
        skip: int = 0,
        limit: int | None = 100,
    ) -> list[ResourceRecord]:
        return await self._repository.list_for_owner(
            user_id, filters=filters, skip=skip, limit=limit
        )

    async def get_record(self, user_id: str, record_id: str) -> ResourceRecord:
        record = await self._repository.get_for_owner(user_id, record_id)
        if record is None:
            raise NotFoundError(self.spec.label, record_id)
        return record

    async def create_record(
        self,
        user_id: str,
        payload: dict[str, Any],
        *,
        managed: dict[str, Any] | None = None,
    ) -> ResourceRecord:
        """Validate ``payload`` and insert it for ``user_id``.

        ``managed`` carries backend-computed values for managed columns; a
        caller payload naming those columns is rejected by validation.
        """
        fields = validate_insert(self.spec, payload)
        for name, value in (managed or {}).items():
            field_spec = self.spec.get_field(name)
            if field_spec is None or not field_spec.managed:
                raise ValueError(f"{name} is not a managed {self.spec.label} field")
            fields[name] = value
        record = ResourceRecord(
            resource=self.spec.name.value,
            user_id=user_id,
            data=fields,
        )
        created = await self._repository.create(record)
        await self._after_mutation(user_id, ChangeOperation.INSERT, created.id)
        return created

    async def update_record(
        self, user_id: str, record_id: str, payload: dict[str, Any]
    ) -> ResourceRecord:
        patch = validate_patch(self.spec, payload)
        record = await self.get_record(user_id, record_id)
        record.apply_patch(patch)
        updated = await self._repository.update(record)
        await self._after_mutation(user_id, ChangeOperation.UPDATE, record_id)
        return updated

    async def delete_record(self, user_id: str, record_id: str) -> bool:
        """Delete a row. Deleting a missing id is not an error; returns False."""
        deleted = await self._repository.delete_for_owner(user_id, record_id)
        if deleted:
            await self._after_mutation(user_id, ChangeOperation.DELETE, record_id)
        else:
            logger.debug("Delete matched no %s row %s for %s", self.spec.name.value, record_id, user_id)
        return deleted

    async def _after_mutation(
        self, user_id: str, operation: ChangeOperation, record_id: str
    ) -> None:
        events = [ChangeEvent(self.spec.name.value, operation, user_id, record_id)]

        if self._analytics is not None and self.spec.name is ResourceName.CROPS:
            snapshot = await self._analytics.refresh(user_id)
            events.append(
                ChangeEvent(
                    ResourceName.CROP_ANALYTICS.value, ChangeOperation.UPDATE, user_id, snapshot.id
                )
            )

        if self._commit is not None:
            await self._commit()

        if self._hub is not None:
            await self._hub.publish_all(events)
