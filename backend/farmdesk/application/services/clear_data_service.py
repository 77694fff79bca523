"""Bulk data clear — best-effort, per-table deletion of everything a user owns.

Each table is cleared in its own transaction. A failure on one table is
recorded in the report and does not roll back tables already cleared; the
remaining tables are still attempted. The profile row is reset, never deleted.
"""

import logging

from farmdesk.application.interfaces import (
    BlobStorage,
    ProfileRepositoryScope,
    RepositoryScope,
)
from farmdesk.application.services.realtime_hub import RealtimeHub
from farmdesk.domain.entities import (
    CLEARABLE_TABLES,
    ChangeEvent,
    ChangeOperation,
    ClearDataReport,
    Profile,
    ResourceName,
    TableClearResult,
)

logger = logging.getLogger(__name__)

PROFILE_RESET_LABEL = "profiles (reset)"


class ClearDataService:
    def __init__(
        self,
        repository_scope: RepositoryScope,
        profile_scope: ProfileRepositoryScope,
        *,
        hub: RealtimeHub | None = None,
        blob_storage: BlobStorage | None = None,
        tables: tuple[ResourceName, ...] = CLEARABLE_TABLES,
    ):
        self._repository_scope = repository_scope
        self._profile_scope = profile_scope
        self._hub = hub
        self._blob_storage = blob_storage
        self._tables = tables

    @property
    def operation_count(self) -> int:
        """Tables cleared plus the profile reset."""
        return len(self._tables) + 1

    async def clear(self, user_id: str) -> ClearDataReport:
        logger.info("Clearing all data for user: %s", user_id)
        report = ClearDataReport(user_id=user_id)

        for table in self._tables:
            result = await self._clear_table(user_id, table)
            report.results.append(result)
            if result.success and self._hub is not None:
                await self._hub.publish(ChangeEvent(table.value, ChangeOperation.DELETE, user_id))

        report.results.append(await self._reset_profile(user_id))
        await self._remove_blobs(user_id)

        logger.info("%s (user %s)", report.message, user_id)
        return report

    async def _clear_table(self, user_id: str, table: ResourceName) -> TableClearResult:
        try:
            async with self._repository_scope(table) as repository:
                deleted = await repository.delete_all_for_owner(user_id)
        except Exception as exc:
            logger.exception("Error clearing %s for user %s", table.value, user_id)
            return TableClearResult(table=table.value, success=False, error=str(exc))
        logger.debug("Cleared %s: %d rows", table.value, deleted)
        return TableClearResult(table=table.value, success=True, deleted=deleted)

    async def _reset_profile(self, user_id: str) -> TableClearResult:
        try:
            async with self._profile_scope() as repository:
                profile = await repository.get(user_id) or Profile(id=user_id)
                profile.reset()
                await repository.save(profile)
        except Exception as exc:
            logger.exception("Error resetting profile for user %s", user_id)
            return TableClearResult(table="profiles", success=False, error=str(exc))
        return TableClearResult(table=PROFILE_RESET_LABEL, success=True)

    async def _remove_blobs(self, user_id: str) -> None:
        if self._blob_storage is None:
            return
        try:
            removed = await self._blob_storage.delete_owner(user_id)
        except OSError:
            logger.exception("Could not remove stored attachments for user %s", user_id)
            return
        logger.debug("Removed %d stored attachments for user %s", removed, user_id)
