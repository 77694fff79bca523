"""Resource Store — the per-resource, per-session collection state machine.

    UNLOADED ──session start──▶ LOADING ──ok──▶ READY ◀──mutation ok──┐
        ▲                          │                 └─────────────────┘
        └──────session end─────────┴──failure──▶ ERROR

The collection is an immutable tuple, newest first, replaced in a single
assignment after each confirmed backend call. Nothing is applied
optimistically, so a failed call leaves the collection untouched.
"""

import logging
from collections.abc import Callable
from enum import Enum
from typing import Any

from farmdesk.client.notifications import (
    Operation,
    Outcome,
    Toast,
    ToastQueue,
    describe_outcome,
)
from farmdesk.client.remote import RemoteResourceClient
from farmdesk.client.session import Session, SessionContext
from farmdesk.domain.entities import ResourceName
from farmdesk.domain.exceptions import AuthError, FarmDeskError

logger = logging.getLogger(__name__)

Record = dict[str, Any]
StoreListener = Callable[["ResourceStore"], None]

DEFAULT_PAGE_SIZE = 100


class StoreState(str, Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class PendingOperation(str, Enum):
    UPDATING = "updating"
    DELETING = "deleting"


class ResourceStore:
    """Owns the in-memory collection of one resource for the active session.

    Results of calls started under an earlier session (the user signed out,
    or switched account, while the call was in flight) are discarded.
    """

    def __init__(
        self,
        resource: ResourceName,
        remote: RemoteResourceClient,
        session: SessionContext,
        toasts: ToastQueue | None = None,
        *,
        filters: dict[str, Any] | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self._resource = resource
        self._remote = remote
        self._session = session
        self._toasts = toasts
        self._filters = filters
        self._page_size = page_size

        self._records: tuple[Record, ...] = ()
        self._state = StoreState.UNLOADED
        self._error: FarmDeskError | None = None
        self._pending: dict[str, PendingOperation] = {}
        self._creating = 0
        self._epoch = 0
        self._load_seq = 0
        self._confirmed = 0  # mutations applied to the collection
        self._listeners: list[StoreListener] = []

        self._remove_session_listener = session.add_listener(self._on_session_change)

    # ── Read access ─────────────────────────────────────────────────

    @property
    def resource(self) -> ResourceName:
        return self._resource

    @property
    def records(self) -> tuple[Record, ...]:
        return self._records

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def error(self) -> FarmDeskError | None:
        return self._error

    @property
    def is_loading(self) -> bool:
        return self._state is StoreState.LOADING

    @property
    def is_active(self) -> bool:
        """True once loaded (or loading) for the current session."""
        return self._state is not StoreState.UNLOADED

    @property
    def creating(self) -> int:
        return self._creating

    def pending(self, record_id: str) -> PendingOperation | None:
        return self._pending.get(record_id)

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Call ``listener(store)`` after every state change."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    # ── Session lifecycle ───────────────────────────────────────────

    async def start(self) -> None:
        """Load immediately when a session is already active at construction time."""
        if self._session.is_authenticated and self._state is StoreState.UNLOADED:
            await self._load_quietly()

    def reset(self) -> None:
        """Back to UNLOADED with an empty collection; in-flight results become stale."""
        self._epoch += 1
        self._records = ()
        self._state = StoreState.UNLOADED
        self._error = None
        self._pending = {}
        self._creating = 0
        self._emit()

    def close(self) -> None:
        self._remove_session_listener()
        self.reset()

    async def _on_session_change(self, session: Session | None) -> None:
        self.reset()
        if session is not None:
            await self._load_quietly()

    async def _load_quietly(self) -> None:
        try:
            await self.refresh()
        except FarmDeskError:
            # state is ERROR and the failure has been reported
            return

    async def refresh(self) -> tuple[Record, ...]:
        """Fetch the collection from the backend (LOADING → READY or ERROR)."""
        if not self._session.is_authenticated:
            self.reset()
            return self._records

        epoch = self._epoch
        self._load_seq += 1
        seq = self._load_seq
        self._state = StoreState.LOADING
        self._error = None
        self._emit()

        while True:
            confirmed = self._confirmed
            try:
                records = await self._fetch_all(epoch, seq)
            except FarmDeskError as exc:
                if self._is_stale(epoch) or seq != self._load_seq:
                    raise
                self._records = ()
                self._state = StoreState.ERROR
                self._error = exc
                self._report_failure(Operation.LOAD, exc)
                self._emit()
                raise

            if self._is_stale(epoch) or seq != self._load_seq:
                logger.debug("Discarding stale %s load", self._resource.value)
                return self._records
            if confirmed == self._confirmed:
                break
            # a mutation landed while listing; the snapshot may predate it
            logger.debug("Re-fetching %s after a concurrent mutation", self._resource.value)

        self._records = tuple(records)
        self._state = StoreState.READY
        self._emit()
        return self._records

    # ── Mutations ───────────────────────────────────────────────────

    async def create(self, fields: dict[str, Any]) -> Record:
        """Insert and, once the backend confirms, prepend the stored record."""
        self._require_session(Operation.CREATE)
        epoch = self._epoch
        self._creating += 1
        self._emit()
        try:
            record = await self._remote.insert(self._resource, fields)
        except FarmDeskError as exc:
            if not self._is_stale(epoch):
                self._creating -= 1
                self._report_failure(Operation.CREATE, exc)
                self._emit()
            raise

        if self._is_stale(epoch):
            logger.debug("Discarding %s insert from a previous session", self._resource.value)
            return record

        self._creating -= 1
        self._confirmed += 1
        self._records = (record, *self._records)
        self._state = StoreState.READY
        self._notify(describe_outcome(Operation.CREATE, self._resource, Outcome.SUCCESS, record=record))
        self._emit()
        return record

    async def update(self, record_id: str, patch: dict[str, Any]) -> Record:
        """Update and, once confirmed, replace the record in place."""
        self._require_session(Operation.UPDATE)
        epoch = self._epoch
        self._pending = {**self._pending, record_id: PendingOperation.UPDATING}
        self._emit()
        try:
            record = await self._remote.update(self._resource, record_id, patch)
        except FarmDeskError as exc:
            if not self._is_stale(epoch):
                self._clear_pending(record_id)
                self._report_failure(Operation.UPDATE, exc)
                self._emit()
            raise

        if self._is_stale(epoch):
            return record

        self._clear_pending(record_id)
        self._confirmed += 1
        self._records = tuple(record if r.get("id") == record_id else r for r in self._records)
        self._state = StoreState.READY
        self._notify(describe_outcome(Operation.UPDATE, self._resource, Outcome.SUCCESS))
        self._emit()
        return record

    async def delete(self, record_id: str) -> None:
        """Remove and, once confirmed, filter the id out. Deleting twice is fine."""
        self._require_session(Operation.DELETE)
        epoch = self._epoch
        self._pending = {**self._pending, record_id: PendingOperation.DELETING}
        self._emit()
        try:
            await self._remote.remove(self._resource, record_id)
        except FarmDeskError as exc:
            if not self._is_stale(epoch):
                self._clear_pending(record_id)
                self._report_failure(Operation.DELETE, exc)
                self._emit()
            raise

        if self._is_stale(epoch):
            return

        self._clear_pending(record_id)
        self._confirmed += 1
        self._records = tuple(r for r in self._records if r.get("id") != record_id)
        self._state = StoreState.READY
        self._notify(describe_outcome(Operation.DELETE, self._resource, Outcome.SUCCESS))
        self._emit()

    # ── Internals ───────────────────────────────────────────────────

    def _is_stale(self, epoch: int) -> bool:
        return epoch != self._epoch

    async def _fetch_all(self, epoch: int, seq: int) -> list[Record]:
        """Page through the backend list until a short page comes back."""
        records: list[Record] = []
        seen: set[Any] = set()
        skip = 0
        while True:
            page = await self._remote.list(
                self._resource, self._filters, skip=skip, limit=self._page_size
            )
            for record in page:
                # an insert between pages shifts rows into the next one
                record_id = record.get("id")
                if record_id in seen:
                    continue
                seen.add(record_id)
                records.append(record)
            if len(page) < self._page_size:
                return records
            if self._is_stale(epoch) or seq != self._load_seq:
                return records
            skip += len(page)

    def _require_session(self, operation: Operation) -> Session:
        session = self._session.current
        if session is None:
            toast = describe_outcome(operation, self._resource, Outcome.UNAUTHENTICATED)
            logger.warning("Refused %s on %s: no active session", operation.value, self._resource.value)
            self._notify(toast)
            raise AuthError(toast.description)
        return session

    def _clear_pending(self, record_id: str) -> None:
        self._pending = {k: v for k, v in self._pending.items() if k != record_id}

    def _report_failure(self, operation: Operation, exc: FarmDeskError) -> None:
        logger.error(
            "Error %s %s for %s: %s",
            _GERUNDS[operation],
            self._resource.value,
            self._session.user_id,
            exc,
        )
        self._notify(describe_outcome(operation, self._resource, Outcome.FAILURE, error=exc))

    def _notify(self, toast: Toast) -> None:
        if self._toasts is not None:
            self._toasts.push(toast)

    def _emit(self) -> None:
        for listener in list(self._listeners):
            listener(self)


_GERUNDS = {
    Operation.LOAD: "fetching",
    Operation.CREATE: "adding",
    Operation.UPDATE: "updating",
    Operation.DELETE: "deleting",
}
