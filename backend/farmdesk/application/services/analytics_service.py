"""Crop analytics — keeps the per-user summary snapshot in step with the crops table."""

import logging
from collections import Counter
from typing import Any

from farmdesk.application.interfaces import RecordRepository
from farmdesk.domain.entities import ResourceRecord

logger = logging.getLogger(__name__)


def summarize_crops(crops: list[ResourceRecord]) -> dict[str, Any]:
    """Totals, per-status counts and per-month planting counts for a crop list."""
    total_area = 0.0
    by_status: Counter[str] = Counter()
    by_month: Counter[str] = Counter()

    for crop in crops:
        area = crop.data.get("area_planted")
        if isinstance(area, (int, float)):
            total_area += area
        by_status[crop.data.get("status") or "unknown"] += 1
        planting_date = crop.data.get("planting_date")
        if planting_date:
            by_month[str(planting_date)[:7]] += 1

    return {
        "total_crops": len(crops),
        "total_area": round(total_area, 4),
        "crops_by_status": dict(by_status),
        "monthly_plantings": dict(sorted(by_month.items())),
    }


class AnalyticsService:
    """Recomputes the single ``crop_analytics`` row of a user."""

    def __init__(
        self,
        crops_repository: RecordRepository,
        analytics_repository: RecordRepository,
    ):
        self._crops = crops_repository
        self._analytics = analytics_repository

    async def refresh(self, user_id: str) -> ResourceRecord:
        crops = await self._crops.list_for_owner(user_id, limit=None)
        summary = summarize_crops(crops)

        existing = await self._analytics.list_for_owner(user_id, limit=1)
        if existing:
            snapshot = existing[0]
            snapshot.apply_patch(summary)
            snapshot = await self._analytics.update(snapshot)
        else:
            snapshot = await self._analytics.create(
                ResourceRecord(
                    resource=self._analytics.resource.value,
                    user_id=user_id,
                    data=summary,
                )
            )

        logger.debug(
            "Crop analytics refreshed for %s: %d crops, %.2f area",
            user_id,
            summary["total_crops"],
            summary["total_area"],
        )
        return snapshot
