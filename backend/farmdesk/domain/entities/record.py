"""Domain entity — a single owner-scoped row of any resource table."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4


@dataclass
class ResourceRecord:
    """Core domain entity for one row of a resource collection.

    Field values live in ``data``; the id, owner and timestamps are
    assigned by the backend and never taken from callers.
    """

    resource: str
    user_id: str
    data: dict[str, Any]
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def apply_patch(self, patch: dict[str, Any]) -> None:
        """Merge changed fields and refresh the updated_at timestamp."""
        self.data = {**self.data, **patch}
        self.updated_at = datetime.now(timezone.utc)

    def to_dict(self) -> dict[str, Any]:
        """Flat wire representation: system fields plus the data fields."""
        return {
            **self.data,
            "id": self.id,
            "user_id": self.user_id,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
