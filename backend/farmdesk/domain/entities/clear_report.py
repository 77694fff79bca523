"""Domain entities for the bulk data clear report."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class TableClearResult:
    """Outcome of clearing (or resetting) one table."""

    table: str
    success: bool
    deleted: int = 0
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"table": self.table, "success": self.success}
        if self.success:
            result["deleted"] = self.deleted
        else:
            result["error"] = self.error
        return result


@dataclass
class ClearDataReport:
    """Per-table report of a best-effort, non-transactional clear."""

    user_id: str
    results: list[TableClearResult] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def error_count(self) -> int:
        return sum(1 for r in self.results if not r.success)

    @property
    def message(self) -> str:
        return (
            f"Data clearing completed. {self.success_count} operations successful, "
            f"{self.error_count} errors."
        )
