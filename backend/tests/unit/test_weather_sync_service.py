"""Unit tests for the weather sync use case."""

import pytest

from farmdesk.application.interfaces import WeatherProvider
from farmdesk.application.services import RecordService, WeatherSyncService
from farmdesk.domain.entities import ResourceName, WeatherObservation, WeatherReport
from farmdesk.domain.exceptions import UpstreamServiceError


class FakeWeatherProvider(WeatherProvider):
    def __init__(self):
        self.requested_days = None

    @property
    def provider_name(self) -> str:
        return "fake"

    async def fetch_current(self, location):
        return {"current": {"temp_c": 31.0}}

    async def fetch_report(self, location, days):
        self.requested_days = days
        observations = [
            WeatherObservation(location, f"2024-07-0{day}", temperature=30.0 + day, humidity=80)
            for day in range(1, days + 2)
        ]
        return WeatherReport(
            current={"temp_c": 31.0},
            forecast=[{"date": o.forecast_date} for o in observations[1:]],
            observations=observations,
        )


@pytest.mark.asyncio
async def test_sync_stores_one_row_per_observation(memory_db):
    provider = FakeWeatherProvider()
    service = WeatherSyncService(
        provider, RecordService(memory_db.repository(ResourceName.WEATHER_DATA)), forecast_days=7
    )

    report = await service.sync("user-a", "Pune")

    rows = memory_db.tables[ResourceName.WEATHER_DATA]
    assert provider.requested_days == 7
    assert len(rows) == 8
    assert len(report.forecast) == 7
    assert {r.user_id for r in rows} == {"user-a"}
    assert {r.data["location"] for r in rows} == {"Pune"}


@pytest.mark.asyncio
async def test_sync_without_provider_fails(memory_db):
    service = WeatherSyncService(None, RecordService(memory_db.repository(ResourceName.WEATHER_DATA)))

    with pytest.raises(UpstreamServiceError):
        await service.sync("user-a", "Pune")
