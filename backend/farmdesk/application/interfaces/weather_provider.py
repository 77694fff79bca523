"""Abstract weather provider interface — port for weather API adapters."""

from abc import ABC, abstractmethod
from typing import Any

from farmdesk.domain.entities import WeatherReport


class WeatherProvider(ABC):
    """Port — current conditions and daily forecasts for a free-text location."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        ...

    @abstractmethod
    async def fetch_current(self, location: str) -> dict[str, Any]:
        """Return the provider's raw response for current conditions.

        Raises:
            UpstreamServiceError: On any non-success response or transport failure.
        """
        ...

    @abstractmethod
    async def fetch_report(self, location: str, days: int) -> WeatherReport:
        """Fetch current conditions and a ``days``-long forecast.

        The report carries the raw provider payloads plus one normalised
        observation for today and one per forecast day.

        Raises:
            UpstreamServiceError: On any non-success response or transport failure.
        """
        ...
