"""Weather provider integrations."""

from .base import WeatherProvider
from .models import (
    NormalizedWeatherResult,
    ProviderChoice,
    ProviderCredentials,
    Quantity,
    ResolvedLocation,
    WeatherQuery,
)
from .open_weather_map import OpenWeatherMapProvider
from .service import WeatherService
from .weather_api import WeatherApiProvider

__all__ = [
    "NormalizedWeatherResult",
    "OpenWeatherMapProvider",
    "ProviderChoice",
    "ProviderCredentials",
    "Quantity",
    "ResolvedLocation",
    "WeatherApiProvider",
    "WeatherProvider",
    "WeatherQuery",
    "WeatherService",
]
