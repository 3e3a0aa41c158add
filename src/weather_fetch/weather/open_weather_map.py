"""OpenWeatherMap (One Call 3.0) weather provider implementation."""

from __future__ import annotations

from typing import Any

from ..exceptions import LocationNotFoundError, ParseError
from .base import WeatherProvider
from .models import (
    DIRECTION_UNIT,
    HUMIDITY_UNIT,
    PRESSURE_UNIT,
    UNIT_LABELS,
    NormalizedWeatherResult,
    ProviderChoice,
    ResolvedLocation,
    Timeframe,
    Units,
    WeatherQuery,
)


class OpenWeatherMapProvider(WeatherProvider):
    """Geocodes addresses and fetches One Call weather from openweathermap.org.

    The One Call endpoints only accept keys registered for the One Call
    subscription; other keys are rejected with HTTP 401 and surface as
    `AuthError`.
    """

    choice = ProviderChoice.ONE_CALL

    def fetch(self, query: WeatherQuery) -> NormalizedWeatherResult:
        location = self._resolve_location(query)
        timeframe = self._timeframe_for(query)
        params: dict[str, Any] = {
            "lat": location.latitude,
            "lon": location.longitude,
            "units": query.units,
            "appid": self._api_key,
        }

        timestamp = query.target_timestamp()
        if timestamp is None:
            params["exclude"] = "minutely,hourly,daily,alerts"
            payload = self._request_json(
                f"{self._api_base}/data/3.0/onecall", params, context="current weather"
            )
            observation = self._require_dict(payload, "current", "current weather")
        else:
            params["dt"] = timestamp
            payload = self._request_json(
                f"{self._api_base}/data/3.0/onecall/timemachine", params, context="timed weather"
            )
            observation = self._first_data_point(payload)

        self.logger.info(
            "%s returned %s weather for %s",
            self.choice,
            timeframe,
            query.location_label(),
            extra={"provider": self.choice.value},
        )
        return self._normalize(observation, location, units=query.units, timeframe=timeframe)

    @property
    def _api_base(self) -> str:
        return str(self.settings.openweathermap_api_base_url).rstrip("/")

    @property
    def _geo_base(self) -> str:
        return str(self.settings.openweathermap_geo_base_url).rstrip("/")

    def _resolve_location(self, query: WeatherQuery) -> ResolvedLocation:
        if query.has_coordinates:
            return ResolvedLocation(latitude=query.latitude, longitude=query.longitude)

        payload = self._request_json(
            f"{self._geo_base}/geo/1.0/direct",
            {"q": query.address, "limit": 1, "appid": self._api_key},
            context="geocoding",
        )
        if not isinstance(payload, list):
            raise ParseError(
                f"{self.choice} geocoding returned unexpected payload type "
                f"{type(payload).__name__}."
            )
        if not payload:
            raise LocationNotFoundError(f"No coordinates found for {query.address!r}.")

        entry = payload[0]
        if not isinstance(entry, dict):
            raise ParseError(f"{self.choice} geocoding entry is not an object.")
        latitude = self._as_float(entry.get("lat"))
        longitude = self._as_float(entry.get("lon"))
        if latitude is None or longitude is None:
            raise ParseError(f"{self.choice} geocoding entry missing numeric 'lat'/'lon'.")

        return ResolvedLocation(
            name=self._as_str(entry.get("name")),
            region=self._as_str(entry.get("state")),
            country=self._as_str(entry.get("country")),
            latitude=latitude,
            longitude=longitude,
        )

    def _first_data_point(self, payload: Any) -> dict[str, Any]:
        data = payload.get("data") if isinstance(payload, dict) else None
        if isinstance(data, list) and data and isinstance(data[0], dict):
            return data[0]
        raise ParseError(
            f"{self.choice} returned no data for the requested date. "
            "Make sure the date is no more than a few days in the future."
        )

    def _normalize(
        self,
        observation: dict[str, Any],
        location: ResolvedLocation,
        *,
        units: Units,
        timeframe: Timeframe,
    ) -> NormalizedWeatherResult:
        labels = UNIT_LABELS[units]
        temperature = self._quantity(observation.get("temp"), labels["temperature"])
        if temperature is None:
            raise ParseError(f"{self.choice} observation missing numeric 'temp'.")
        observed_at = self._parse_epoch(observation.get("dt"))
        if observed_at is None:
            raise ParseError(f"{self.choice} observation missing numeric 'dt'.")

        conditions = "Unknown"
        description: str | None = None
        weather = observation.get("weather")
        if isinstance(weather, list) and weather and isinstance(weather[0], dict):
            conditions = self._as_str(weather[0].get("main")) or conditions
            description = self._as_str(weather[0].get("description"))

        return NormalizedWeatherResult(
            source=self.choice,
            location=location,
            timeframe=timeframe,
            observed_at=observed_at,
            temperature=temperature,
            feels_like=self._quantity(observation.get("feels_like"), labels["temperature"]),
            humidity=self._quantity(observation.get("humidity"), HUMIDITY_UNIT),
            pressure=self._quantity(observation.get("pressure"), PRESSURE_UNIT),
            wind_speed=self._quantity(observation.get("wind_speed"), labels["wind_speed"]),
            wind_direction=self._quantity(observation.get("wind_deg"), DIRECTION_UNIT),
            conditions=conditions,
            description=description,
        )
