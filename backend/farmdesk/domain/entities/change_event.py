"""Domain entity for row-change notifications pushed over the realtime feed."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ChangeOperation(str, Enum):
    """Kinds of row changes."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class ChangeEvent:
    """A committed change to one of a user's rows.

    ``record_id`` is None for bulk changes (e.g. clearing a whole table).
    """

    table: str
    operation: ChangeOperation
    user_id: str
    record_id: str | None = None
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "table": self.table,
            "operation": self.operation.value,
            "user_id": self.user_id,
            "record_id": self.record_id,
            "occurred_at": self.occurred_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChangeEvent":
        occurred = data.get("occurred_at")
        return cls(
            table=data["table"],
            operation=ChangeOperation(data["operation"]),
            user_id=data["user_id"],
            record_id=data.get("record_id"),
            occurred_at=(
                datetime.fromisoformat(occurred) if occurred else datetime.now(timezone.utc)
            ),
        )
