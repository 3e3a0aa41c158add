"""Builders and canned provider payloads shared by the test modules."""

from __future__ import annotations

import logging
from datetime import date
from types import SimpleNamespace
from typing import Any

from weather_fetch.weather.models import ProviderChoice, ProviderCredentials
from weather_fetch.weather.open_weather_map import OpenWeatherMapProvider
from weather_fetch.weather.weather_api import WeatherApiProvider

FIXED_TODAY = date(2026, 10, 16)

KYIV_GEOCODE = [
    {"name": "Kyiv", "lat": 50.4500336, "lon": 30.5241361, "country": "UA", "state": "Kyiv"}
]
OWM_CURRENT = {
    "lat": 50.45,
    "lon": 30.5241,
    "timezone": "Europe/Kyiv",
    "current": {
        "dt": 1700000000,
        "temp": 3.5,
        "feels_like": 0.2,
        "pressure": 1012,
        "humidity": 81,
        "wind_speed": 4.1,
        "wind_deg": 240,
        "weather": [{"id": 803, "main": "Clouds", "description": "broken clouds"}],
    },
}
OWM_TIMEMACHINE = {
    "lat": 50.45,
    "lon": 30.5241,
    "timezone": "Europe/Kyiv",
    "data": [
        {
            "dt": 1791979200,
            "temp": 11.2,
            "feels_like": 10.1,
            "pressure": 1018,
            "humidity": 64,
            "wind_speed": 2.6,
            "wind_deg": 180,
            "weather": [{"id": 800, "main": "Clear", "description": "clear sky"}],
        }
    ],
}

WEATHERAPI_LOCATION = {
    "name": "Kyiv",
    "region": "Kyyivs'ka Oblast'",
    "country": "Ukraine",
    "lat": 50.43,
    "lon": 30.52,
    "tz_id": "Europe/Kiev",
}
WEATHERAPI_CURRENT = {
    "location": WEATHERAPI_LOCATION,
    "current": {
        "last_updated_epoch": 1699999200,
        "temp_c": 3.0,
        "temp_f": 37.4,
        "condition": {"text": "Overcast"},
        "wind_mph": 9.4,
        "wind_kph": 15.1,
        "wind_degree": 230,
        "pressure_mb": 1012.0,
        "humidity": 80,
        "feelslike_c": -0.6,
        "feelslike_f": 30.9,
    },
}


def weatherapi_day(day: str, date_epoch: int, avgtemp_c: float = 9.0) -> dict[str, Any]:
    return {
        "date": day,
        "date_epoch": date_epoch,
        "day": {
            "avgtemp_c": avgtemp_c,
            "avgtemp_f": round(avgtemp_c * 9 / 5 + 32, 1),
            "maxwind_kph": 18.0,
            "maxwind_mph": 11.2,
            "avghumidity": 70,
            "condition": {"text": "Patchy rain possible"},
        },
    }


def make_settings(**overrides: Any) -> Any:
    defaults = {
        "http_timeout_seconds": 5.0,
        "openweathermap_api_base_url": "https://api.openweathermap.org/",
        "openweathermap_geo_base_url": "http://api.openweathermap.org/",
        "weatherapi_base_url": "http://api.weatherapi.com/",
    }
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


def make_owm_provider(api_key: str = "owm-test-key", **settings_overrides: Any) -> Any:
    return OpenWeatherMapProvider(
        credentials=ProviderCredentials(provider=ProviderChoice.ONE_CALL, api_key=api_key),
        settings=make_settings(**settings_overrides),
        logger=logging.getLogger("test_open_weather_map"),
        today=lambda: FIXED_TODAY,
    )


def make_weatherapi_provider(api_key: str = "wapi-test-key", **settings_overrides: Any) -> Any:
    return WeatherApiProvider(
        credentials=ProviderCredentials(provider=ProviderChoice.SIMPLE, api_key=api_key),
        settings=make_settings(**settings_overrides),
        logger=logging.getLogger("test_weather_api"),
        today=lambda: FIXED_TODAY,
    )
