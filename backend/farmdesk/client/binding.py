"""View Binding — what presentation code sees of one resource store."""

import logging
from typing import Any

from farmdesk.client.store import Record, ResourceStore
from farmdesk.domain.exceptions import FarmDeskError

logger = logging.getLogger(__name__)


class ResourceView:
    """``records``, ``is_loading`` and the three mutations of one store.

    A view keeps its own snapshot of the store, refreshed on every store
    change while open. After ``close()`` the snapshot is frozen and results
    of calls still in flight are discarded instead of being delivered.
    """

    def __init__(self, store: ResourceStore) -> None:
        self._store = store
        self._records = store.records
        self._is_loading = store.is_loading
        self._closed = False
        self._unsubscribe = store.subscribe(self._on_store_change)

    @property
    def records(self) -> tuple[Record, ...]:
        return self._records

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def closed(self) -> bool:
        return self._closed

    def is_pending(self, record_id: str) -> bool:
        """True while an update or delete for ``record_id`` is in flight."""
        return self._store.pending(record_id) is not None

    async def create(self, fields: dict[str, Any]) -> Record | None:
        return await self._deliver(self._store.create(fields))

    async def update(self, record_id: str, patch: dict[str, Any]) -> Record | None:
        return await self._deliver(self._store.update(record_id, patch))

    async def delete(self, record_id: str) -> None:
        await self._deliver(self._store.delete(record_id))

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._unsubscribe()

    def _on_store_change(self, store: ResourceStore) -> None:
        self._records = store.records
        self._is_loading = store.is_loading

    async def _deliver(self, call):
        if self._closed:
            call.close()
            raise RuntimeError("ResourceView is closed")
        try:
            result = await call
        except FarmDeskError:
            if self._closed:
                logger.debug("Dropping late failure for closed %s view", self._store.resource.value)
                return None
            raise
        if self._closed:
            logger.debug("Dropping late result for closed %s view", self._store.resource.value)
            return None
        return result
