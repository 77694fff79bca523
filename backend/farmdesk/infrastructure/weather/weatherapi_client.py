"""WeatherAPI client — implements the WeatherProvider interface.

Talks to https://www.weatherapi.com (``current.json`` / ``forecast.json``)
using httpx.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from farmdesk.application.interfaces.weather_provider import WeatherProvider
from farmdesk.domain.entities import WeatherObservation, WeatherReport
from farmdesk.domain.exceptions import UpstreamServiceError

logger = logging.getLogger(__name__)


class WeatherApiClient(WeatherProvider):
    """Infrastructure adapter — connects to WeatherAPI."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.weatherapi.com/v1",
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 15.0,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._http_client = http_client
        self._timeout = timeout

    @property
    def provider_name(self) -> str:
        return "weatherapi"

    async def fetch_current(self, location: str) -> dict[str, Any]:
        return await self._get("current.json", {"q": location})

    async def fetch_report(self, location: str, days: int) -> WeatherReport:
        current_data, forecast_data = await asyncio.gather(
            self.fetch_current(location),
            self._get("forecast.json", {"q": location, "days": days}),
        )

        try:
            current = current_data["current"]
            forecast_days = forecast_data["forecast"]["forecastday"]
            observations = [_observation_from_current(location, current)]
            observations.extend(_observation_from_day(location, day) for day in forecast_days)
        except (KeyError, TypeError) as exc:
            raise UpstreamServiceError(
                self.provider_name, 502, f"Unexpected weather payload: missing {exc}"
            ) from exc

        return WeatherReport(current=current, forecast=forecast_days, observations=observations)

    async def _get(self, endpoint: str, params: dict[str, Any]) -> dict[str, Any]:
        client = self._http_client or httpx.AsyncClient(timeout=self._timeout)
        should_close = self._http_client is None
        url = f"{self._base_url}/{endpoint}"

        try:
            response = await client.get(url, params={"key": self._api_key, **params})
        except httpx.TransportError as exc:
            raise UpstreamServiceError(
                self.provider_name, 503, f"Could not reach weather API: {exc}"
            ) from exc
        finally:
            if should_close:
                await client.aclose()

        if response.status_code != 200:
            message = _error_message(response)
            logger.warning("Weather API %s returned %d: %s", endpoint, response.status_code, message)
            raise UpstreamServiceError(self.provider_name, response.status_code, message)

        return response.json()


def _observation_from_current(location: str, current: dict[str, Any]) -> WeatherObservation:
    return WeatherObservation(
        location=location,
        forecast_date=datetime.now(timezone.utc).date().isoformat(),
        temperature=current.get("temp_c"),
        humidity=current.get("humidity"),
        rainfall=current.get("precip_mm"),
        wind_speed=current.get("wind_kph"),
        conditions=(current.get("condition") or {}).get("text"),
    )


def _observation_from_day(location: str, forecast_day: dict[str, Any]) -> WeatherObservation:
    day = forecast_day.get("day") or {}
    return WeatherObservation(
        location=location,
        forecast_date=forecast_day["date"],
        temperature=day.get("avgtemp_c"),
        humidity=day.get("avghumidity"),
        rainfall=day.get("totalprecip_mm"),
        wind_speed=day.get("maxwind_kph"),
        conditions=(day.get("condition") or {}).get("text"),
    )


def _error_message(response: httpx.Response) -> str:
    """WeatherAPI errors look like ``{"error": {"code": 1006, "message": "..."}}``."""
    try:
        data = response.json()
    except ValueError:
        return response.text
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict):
        return str(error.get("message", response.text))
    return response.text
