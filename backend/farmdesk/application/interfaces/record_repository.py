"""Abstract repository interface (port) for owner-scoped resource records."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from typing import Any

from farmdesk.domain.entities import ResourceName, ResourceRecord


class RecordRepository(ABC):
    """Port for one resource table — implemented in the infrastructure layer.

    Every read and write is scoped by ``user_id``; a row owned by another
    user is indistinguishable from a missing one.
    """

    @property
    @abstractmethod
    def resource(self) -> ResourceName:
        """The table this repository reads and writes."""
        ...

    @abstractmethod
    async def list_for_owner(
        self,
        user_id: str,
        *,
        filters: dict[str, Any] | None = None,
        skip: int = 0,
        limit: int | None = 100,
    ) -> list[ResourceRecord]:
        """Return the owner's rows matching ``filters``, newest first (no limit when None)."""
        ...

    @abstractmethod
    async def get_for_owner(self, user_id: str, record_id: str) -> ResourceRecord | None:
        """Retrieve one row, or None if missing or owned by someone else."""
        ...

    @abstractmethod
    async def create(self, record: ResourceRecord) -> ResourceRecord:
        """Persist a new row and return it."""
        ...

    @abstractmethod
    async def update(self, record: ResourceRecord) -> ResourceRecord:
        """Persist changed fields of an existing row."""
        ...

    @abstractmethod
    async def delete_for_owner(self, user_id: str, record_id: str) -> bool:
        """Delete one row. Returns False when nothing matched."""
        ...

    @abstractmethod
    async def delete_all_for_owner(self, user_id: str) -> int:
        """Delete every row the owner has. Returns the number deleted."""
        ...


# Opens a repository bound to its own transaction, committed on clean exit.
RepositoryScope = Callable[[ResourceName], AbstractAsyncContextManager[RecordRepository]]
