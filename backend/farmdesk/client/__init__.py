"""FarmDesk client: remote resource access, stores and notifications."""

from farmdesk.client.binding import ResourceView
from farmdesk.client.notifications import (
    CHANGE_ACTIONS,
    Announce,
    ChangeDispatcher,
    Operation,
    Outcome,
    RealtimeSubscriber,
    Refetch,
    Toast,
    ToastQueue,
    ToastVariant,
    describe_outcome,
    parse_sse,
)
from farmdesk.client.remote import RemoteResourceClient
from farmdesk.client.session import Session, SessionContext
from farmdesk.client.store import PendingOperation, ResourceStore, StoreState

__all__ = [
    "ResourceView",
    "CHANGE_ACTIONS",
    "Announce",
    "ChangeDispatcher",
    "Operation",
    "Outcome",
    "RealtimeSubscriber",
    "Refetch",
    "Toast",
    "ToastQueue",
    "ToastVariant",
    "describe_outcome",
    "parse_sse",
    "RemoteResourceClient",
    "Session",
    "SessionContext",
    "PendingOperation",
    "ResourceStore",
    "StoreState",
]
