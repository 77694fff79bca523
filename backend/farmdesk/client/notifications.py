"""Notification Bridge — toasts for store outcomes and the realtime change feed.

``describe_outcome`` is a pure mapping from (operation, resource, outcome) to
a ``Toast``. ``ToastQueue`` holds the active toasts. ``ChangeDispatcher``
turns pushed ``ChangeEvent`` objects into store re-fetches through one
explicit table, and ``RealtimeSubscriber`` feeds it from the SSE stream.
"""

import itertools
import json
import logging
import time
from collections import deque
from collections.abc import AsyncIterator, Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from farmdesk.client.session import SessionContext
from farmdesk.domain.entities import ChangeEvent, ChangeOperation, ResourceName, get_resource_spec
from farmdesk.domain.exceptions import FarmDeskError, ValidationError

if TYPE_CHECKING:
    from farmdesk.client.remote import RemoteResourceClient
    from farmdesk.client.store import ResourceStore
    from farmdesk.config import Settings

logger = logging.getLogger(__name__)


class Operation(str, Enum):
    LOAD = "load"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class Outcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    UNAUTHENTICATED = "unauthenticated"


class ToastVariant(str, Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


_toast_ids = itertools.count(1)


@dataclass(frozen=True)
class Toast:
    """A short-lived user-facing message."""

    title: str
    description: str
    variant: ToastVariant = ToastVariant.DEFAULT
    duration: float | None = None  # seconds; None = queue default
    id: int = field(default_factory=lambda: next(_toast_ids))


_VERBS = {
    Operation.LOAD: "fetch",
    Operation.CREATE: "add",
    Operation.UPDATE: "update",
    Operation.DELETE: "delete",
}


def _plural(resource: ResourceName) -> str:
    return resource.value.replace("_", " ")


def describe_outcome(
    operation: Operation,
    resource: ResourceName,
    outcome: Outcome,
    *,
    record: Mapping[str, Any] | None = None,
    error: Exception | None = None,
) -> Toast:
    """Map a store outcome to the toast shown for it."""
    singular = get_resource_spec(resource).label
    plural = _plural(resource)
    verb = _VERBS[operation]

    if outcome is Outcome.UNAUTHENTICATED:
        return Toast(
            title="Error",
            description=f"You must be logged in to {verb} {plural}.",
            variant=ToastVariant.DESTRUCTIVE,
        )

    if outcome is Outcome.FAILURE:
        target = plural if operation is Operation.LOAD else singular
        description = f"Failed to {verb} {target}. Please try again."
        if isinstance(error, ValidationError) and error.errors:
            description = f"Failed to {verb} {target}: {'; '.join(error.errors)}"
        return Toast(title="Error", description=description, variant=ToastVariant.DESTRUCTIVE)

    if operation is Operation.CREATE:
        name = (record or {}).get("name")
        if name:
            return Toast(title="Success", description=f"{name} has been added to your {plural} list.")
        return Toast(title="Success", description=f"New {singular} added successfully.")
    if operation is Operation.LOAD:
        return Toast(title="Loaded", description=f"Your {plural} are up to date.")
    past = "updated" if operation is Operation.UPDATE else "deleted"
    return Toast(title="Success", description=f"{singular.capitalize()} {past} successfully.")


class ToastQueue:
    """Bounded FIFO of active toasts; each expires after its duration."""

    def __init__(
        self,
        limit: int = 5,
        default_duration: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._entries: deque[tuple[Toast, float]] = deque(maxlen=limit)
        self._default_duration = default_duration
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: "Settings") -> "ToastQueue":
        return cls(limit=settings.toast_limit, default_duration=settings.toast_duration_seconds)

    def push(self, toast: Toast) -> Toast:
        """Queue ``toast``; when full the oldest toast is dropped."""
        duration = toast.duration if toast.duration is not None else self._default_duration
        self._entries.append((toast, self._clock() + duration))
        return toast

    def active(self) -> tuple[Toast, ...]:
        self._prune()
        return tuple(toast for toast, _ in self._entries)

    def dismiss(self, toast_id: int) -> bool:
        for entry in self._entries:
            if entry[0].id == toast_id:
                self._entries.remove(entry)
                return True
        return False

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self.active())

    def _prune(self) -> None:
        now = self._clock()
        if any(expires <= now for _, expires in self._entries):
            self._entries = deque(
                (entry for entry in self._entries if entry[1] > now),
                maxlen=self._entries.maxlen,
            )


# ── Change dispatch ──────────────────────────────────────────────────


@dataclass(frozen=True)
class Refetch:
    """Reload one store from the backend."""

    resource: ResourceName


@dataclass(frozen=True)
class Announce:
    """Show a toast for a pushed change."""

    title: str
    description: str


ChangeAction = Refetch | Announce

_EVERY_OPERATION = tuple(ChangeOperation)


def _refetch_on_any(*resources: ResourceName) -> dict[tuple[ResourceName, ChangeOperation], tuple[ChangeAction, ...]]:
    actions = tuple(Refetch(r) for r in resources)
    return {(resources[0], op): actions for op in _EVERY_OPERATION}


CHANGE_ACTIONS: dict[tuple[ResourceName, ChangeOperation], tuple[ChangeAction, ...]] = {
    # Crop writes also change the analytics snapshot.
    **_refetch_on_any(ResourceName.CROPS, ResourceName.CROP_ANALYTICS),
    **_refetch_on_any(ResourceName.PARCELS),
    **_refetch_on_any(ResourceName.INVENTORY),
    **_refetch_on_any(ResourceName.TRANSACTIONS),
    **_refetch_on_any(ResourceName.NOTIFICATIONS),
    **_refetch_on_any(ResourceName.CROP_ATTACHMENTS),
    **_refetch_on_any(ResourceName.WEATHER_DATA),
    **_refetch_on_any(ResourceName.CROP_RECOMMENDATIONS),
    **_refetch_on_any(ResourceName.CROP_ANALYTICS),
    **_refetch_on_any(ResourceName.USER_PORTFOLIOS),
    (ResourceName.NOTIFICATIONS, ChangeOperation.INSERT): (
        Refetch(ResourceName.NOTIFICATIONS),
        Announce("New notification", "You have a new farm notification."),
    ),
}


class ChangeDispatcher:
    """Applies ``CHANGE_ACTIONS`` to pushed events for the active session only."""

    def __init__(
        self,
        session: SessionContext,
        stores: Mapping[ResourceName, "ResourceStore"],
        toasts: ToastQueue | None = None,
        actions: Mapping[tuple[ResourceName, ChangeOperation], tuple[ChangeAction, ...]] = CHANGE_ACTIONS,
    ) -> None:
        self._session = session
        self._stores = stores
        self._toasts = toasts
        self._actions = actions

    def actions_for(self, event: ChangeEvent) -> tuple[ChangeAction, ...]:
        try:
            resource = ResourceName(event.table)
        except ValueError:
            return ()
        return self._actions.get((resource, event.operation), ())

    async def dispatch(self, event: ChangeEvent) -> tuple[ChangeAction, ...]:
        """Run the actions mapped to ``event``; returns the actions taken.

        Events arriving with no active session, or for another user, are
        discarded.
        """
        active_user = self._session.user_id
        if active_user is None or event.user_id != active_user:
            logger.debug("Discarding change event for %s (active: %s)", event.user_id, active_user)
            return ()

        actions = self.actions_for(event)
        for action in actions:
            if isinstance(action, Refetch):
                await self._refetch(action.resource)
            elif self._toasts is not None:
                self._toasts.push(Toast(title=action.title, description=action.description))
        return actions

    async def _refetch(self, resource: ResourceName) -> None:
        store = self._stores.get(resource)
        if store is None or not store.is_active:
            return
        try:
            await store.refresh()
        except FarmDeskError as exc:
            # already logged and reported by the store
            logger.debug("Re-fetch of %s after change failed: %s", resource.value, exc)


async def parse_sse(lines: AsyncIterator[str]) -> AsyncIterator[tuple[str, str]]:
    """Group raw SSE lines into ``(event, data)`` pairs."""
    event_type = "message"
    data_lines: list[str] = []
    async for line in lines:
        if line == "":
            if data_lines:
                yield event_type, "\n".join(data_lines)
            event_type, data_lines = "message", []
        elif line.startswith(":"):
            continue
        elif line.startswith("event:"):
            event_type = line[len("event:"):].strip()
        elif line.startswith("data:"):
            data_lines.append(line[len("data:"):].lstrip())
    if data_lines:
        yield event_type, "\n".join(data_lines)


class RealtimeSubscriber:
    """Consumes the backend change feed and hands each change to the dispatcher."""

    def __init__(self, remote: "RemoteResourceClient", dispatcher: ChangeDispatcher) -> None:
        self._remote = remote
        self._dispatcher = dispatcher

    async def run(self) -> int:
        """Process the feed until the server closes it. Returns the number of changes seen."""
        seen = 0
        async for event_type, data in parse_sse(self._remote.stream_changes()):
            if event_type != "change":
                continue
            try:
                event = ChangeEvent.from_dict(json.loads(data))
            except (ValueError, KeyError) as exc:
                logger.warning("Ignoring malformed change event: %s", exc)
                continue
            seen += 1
            await self._dispatcher.dispatch(event)
        return seen
