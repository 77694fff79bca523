"""Domain entities for weather observations."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class WeatherObservation:
    """A single day's weather for a location (current or forecast)."""

    location: str
    forecast_date: str  # ISO date
    temperature: float | None = None
    humidity: float | None = None
    rainfall: float | None = None
    wind_speed: float | None = None
    conditions: str | None = None

    def to_fields(self) -> dict[str, Any]:
        return {
            "location": self.location,
            "forecast_date": self.forecast_date,
            "temperature": self.temperature,
            "humidity": self.humidity,
            "rainfall": self.rainfall,
            "wind_speed": self.wind_speed,
            "conditions": self.conditions,
        }


@dataclass
class WeatherReport:
    """Raw provider payloads plus the normalised observations derived from them."""

    current: dict[str, Any]
    forecast: list[dict[str, Any]]
    observations: list[WeatherObservation] = field(default_factory=list)
