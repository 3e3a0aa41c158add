"""WeatherAPI.com weather provider implementation."""

from __future__ import annotations

from datetime import date
from typing import Any

import httpx

from ..exceptions import AuthError, LocationNotFoundError, ParseError, WeatherProviderError
from ..redaction import sanitize_text
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

KPH_TO_METERS_PER_SECOND = 1 / 3.6

# https://www.weatherapi.com/docs/#intro-error-codes
_LOCATION_NOT_FOUND_CODES = frozenset({1006})
_AUTH_ERROR_CODES = frozenset({1002, 2006, 2007, 2008, 2009})


class WeatherApiProvider(WeatherProvider):
    """Fetches current, forecast and history weather from weatherapi.com."""

    choice = ProviderChoice.SIMPLE

    def fetch(self, query: WeatherQuery) -> NormalizedWeatherResult:
        q = query.address or f"{query.latitude},{query.longitude}"
        timeframe = self._timeframe_for(query)

        if query.target_date is None:
            payload = self._request_json(
                f"{self._base}/v1/current.json",
                {"key": self._api_key, "q": q, "aqi": "no"},
                context="current weather",
            )
            result = self._normalize_current(payload, units=query.units)
        elif timeframe == "forecast":
            days_from_now = (query.target_date - self._today()).days + 1
            payload = self._request_json(
                f"{self._base}/v1/forecast.json",
                {
                    "key": self._api_key,
                    "q": q,
                    "days": days_from_now,
                    "aqi": "no",
                    "alerts": "no",
                },
                context="forecast",
            )
            result = self._normalize_day(
                payload, query.target_date, units=query.units, timeframe="forecast"
            )
        else:
            payload = self._request_json(
                f"{self._base}/v1/history.json",
                {"key": self._api_key, "q": q, "dt": query.target_date.isoformat()},
                context="history",
            )
            result = self._normalize_day(
                payload, query.target_date, units=query.units, timeframe="history"
            )

        self.logger.info(
            "%s returned %s weather for %s",
            self.choice,
            timeframe,
            query.location_label(),
            extra={"provider": self.choice.value},
        )
        return result

    @property
    def _base(self) -> str:
        return str(self.settings.weatherapi_base_url).rstrip("/")

    def _status_error(self, response: httpx.Response, context: str) -> WeatherProviderError:
        code, message = self._error_details(response)
        if code in _LOCATION_NOT_FOUND_CODES:
            return LocationNotFoundError(f"{self.choice} could not resolve location: {message}")
        if code in _AUTH_ERROR_CODES:
            return AuthError(
                f"{self.choice} rejected the API key during {context} (code {code}): {message}"
            )
        return super()._status_error(response, context)

    @staticmethod
    def _error_details(response: httpx.Response) -> tuple[int | None, str]:
        try:
            payload = response.json()
        except ValueError:
            return None, sanitize_text(response.text[:300])
        error = payload.get("error") if isinstance(payload, dict) else None
        if not isinstance(error, dict):
            return None, sanitize_text(response.text[:300])
        code = error.get("code")
        message = error.get("message")
        return (
            code if isinstance(code, int) else None,
            sanitize_text(message) if isinstance(message, str) else "",
        )

    def _normalize_location(self, payload: Any) -> ResolvedLocation:
        raw = self._require_dict(payload, "location", "weather")
        latitude = self._as_float(raw.get("lat"))
        longitude = self._as_float(raw.get("lon"))
        if latitude is None or longitude is None:
            raise ParseError(f"{self.choice} location missing numeric 'lat'/'lon'.")
        return ResolvedLocation(
            name=self._as_str(raw.get("name")),
            region=self._as_str(raw.get("region")),
            country=self._as_str(raw.get("country")),
            latitude=latitude,
            longitude=longitude,
        )

    def _condition_text(self, raw: dict[str, Any]) -> str:
        condition = raw.get("condition")
        if isinstance(condition, dict):
            return self._as_str(condition.get("text")) or "Unknown"
        return "Unknown"

    def _normalize_current(self, payload: Any, *, units: Units) -> NormalizedWeatherResult:
        location = self._normalize_location(payload)
        current = self._require_dict(payload, "current", "current weather")
        labels = UNIT_LABELS[units]
        metric = units == "metric"

        temperature = self._quantity(
            current.get("temp_c" if metric else "temp_f"), labels["temperature"]
        )
        if temperature is None:
            raise ParseError(f"{self.choice} current weather missing numeric temperature.")
        observed_at = self._parse_epoch(current.get("last_updated_epoch"))
        if observed_at is None:
            raise ParseError(f"{self.choice} current weather missing 'last_updated_epoch'.")

        if metric:
            wind = self._quantity(
                current.get("wind_kph"), labels["wind_speed"], scale=KPH_TO_METERS_PER_SECOND
            )
        else:
            wind = self._quantity(current.get("wind_mph"), labels["wind_speed"])

        return NormalizedWeatherResult(
            source=self.choice,
            location=location,
            timeframe="current",
            observed_at=observed_at,
            temperature=temperature,
            feels_like=self._quantity(
                current.get("feelslike_c" if metric else "feelslike_f"), labels["temperature"]
            ),
            humidity=self._quantity(current.get("humidity"), HUMIDITY_UNIT),
            pressure=self._quantity(current.get("pressure_mb"), PRESSURE_UNIT),
            wind_speed=wind,
            wind_direction=self._quantity(current.get("wind_degree"), DIRECTION_UNIT),
            conditions=self._condition_text(current),
        )

    def _find_day(self, payload: Any, target_date: date) -> dict[str, Any]:
        forecast = self._require_dict(payload, "forecast", "daily weather")
        days = forecast.get("forecastday")
        if not isinstance(days, list):
            raise ParseError(f"{self.choice} payload missing 'forecast.forecastday' list.")
        wanted = target_date.isoformat()
        for entry in days:
            if isinstance(entry, dict) and entry.get("date") == wanted:
                return entry
        # Plans cap the forecast horizon; a shorter list means the date is out of reach.
        raise ParseError(
            f"{self.choice} returned no data for {wanted}. "
            "If your input is correct, this might be caused by limitations of the current plan."
        )

    def _normalize_day(
        self,
        payload: Any,
        target_date: date,
        *,
        units: Units,
        timeframe: Timeframe,
    ) -> NormalizedWeatherResult:
        location = self._normalize_location(payload)
        entry = self._find_day(payload, target_date)
        day = self._require_dict(entry, "day", "daily weather")
        labels = UNIT_LABELS[units]
        metric = units == "metric"

        temperature = self._quantity(
            day.get("avgtemp_c" if metric else "avgtemp_f"), labels["temperature"]
        )
        if temperature is None:
            raise ParseError(f"{self.choice} daily weather missing numeric average temperature.")
        observed_at = self._parse_epoch(entry.get("date_epoch"))
        if observed_at is None:
            raise ParseError(f"{self.choice} daily weather missing 'date_epoch'.")

        if metric:
            wind = self._quantity(
                day.get("maxwind_kph"), labels["wind_speed"], scale=KPH_TO_METERS_PER_SECOND
            )
        else:
            wind = self._quantity(day.get("maxwind_mph"), labels["wind_speed"])

        return NormalizedWeatherResult(
            source=self.choice,
            location=location,
            timeframe=timeframe,
            observed_at=observed_at,
            temperature=temperature,
            humidity=self._quantity(day.get("avghumidity"), HUMIDITY_UNIT),
            wind_speed=wind,
            conditions=self._condition_text(day),
        )
