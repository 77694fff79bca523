"""Weather sync use case — fetch current + forecast and store one row per day."""

import logging

from farmdesk.application.interfaces import WeatherProvider
from farmdesk.application.services.record_service import RecordService
from farmdesk.domain.entities import WeatherReport
from farmdesk.domain.exceptions import UpstreamServiceError

logger = logging.getLogger(__name__)


class WeatherSyncService:
    def __init__(
        self,
        provider: WeatherProvider | None,
        records: RecordService,
        forecast_days: int = 7,
    ):
        self._provider = provider
        self._records = records
        self._forecast_days = forecast_days

    async def sync(self, user_id: str, location: str) -> WeatherReport:
        if self._provider is None:
            raise UpstreamServiceError("weather", 500, "Weather API key not configured")

        report = await self._provider.fetch_report(location, self._forecast_days)
        for observation in report.observations:
            await self._records.create_record(user_id, observation.to_fields())
        logger.info(
            "Weather synced for %s (%s): %d rows", user_id, location, len(report.observations)
        )
        return report
