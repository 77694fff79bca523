"""Abstract blob storage interface (port) for attachment content."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class StoredBlob:
    """Result of storing one blob."""

    path: str  # storage key, relative to the storage root
    filename: str
    size: int
    mime_type: str


class BlobStorage(ABC):
    """Port for binary content keyed by path, grouped per owner."""

    @abstractmethod
    async def store(self, owner_id: str, content: bytes, filename: str) -> StoredBlob:
        ...

    @abstractmethod
    def owns(self, owner_id: str, path: str) -> bool:
        """True when ``path`` names a blob inside ``owner_id``'s own area."""
        ...

    @abstractmethod
    async def read(self, path: str) -> bytes:
        """Raises FileNotFoundError when the blob does not exist."""
        ...

    @abstractmethod
    async def delete(self, path: str) -> bool:
        ...

    @abstractmethod
    async def delete_owner(self, owner_id: str) -> int:
        """Remove every blob stored for an owner. Returns the count removed."""
        ...
