"""Weather infrastructure package."""

from .weatherapi_client import WeatherApiClient

__all__ = ["WeatherApiClient"]
