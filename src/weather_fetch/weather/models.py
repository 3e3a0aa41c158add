"""Typed models for weather queries and normalized provider results."""

from __future__ import annotations

from datetime import UTC, date, datetime, time
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..exceptions import QueryError

Units = Literal["metric", "imperial"]
Timeframe = Literal["current", "forecast", "history"]

UNIT_LABELS: dict[str, dict[str, str]] = {
    "metric": {"temperature": "C", "wind_speed": "m/s"},
    "imperial": {"temperature": "F", "wind_speed": "mph"},
}
HUMIDITY_UNIT = "%"
PRESSURE_UNIT = "hPa"
DIRECTION_UNIT = "deg"


class ProviderChoice(StrEnum):
    """Closed set of supported weather providers."""

    ONE_CALL = "open-weather-map"
    SIMPLE = "weather-api"

    @property
    def env_var(self) -> str:
        """Environment variable holding this provider's API key."""
        return self.value.upper().replace("-", "_")

    @classmethod
    def default(cls) -> ProviderChoice:
        return cls.ONE_CALL


class ProviderCredentials(BaseModel):
    """API key for one provider. Loaded once and never mutated."""

    model_config = ConfigDict(frozen=True)

    provider: ProviderChoice
    api_key: str = Field(repr=False)


class WeatherQuery(BaseModel):
    """A single weather request: where, when and in which unit system."""

    model_config = ConfigDict(frozen=True)

    address: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    target_date: date | None = None
    units: Units = "metric"

    @field_validator("address", mode="before")
    @classmethod
    def blank_address_to_none(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = " ".join(value.split())
            return value or None
        return value

    @model_validator(mode="after")
    def validate_location(self) -> WeatherQuery:
        has_coords = self.latitude is not None or self.longitude is not None
        if self.address and has_coords:
            raise QueryError("Use either an address or coordinates, not both.")
        if self.address:
            return self
        if self.latitude is None or self.longitude is None:
            raise QueryError(
                "Missing location: provide an address or both latitude and longitude."
            )
        if not (-90 <= self.latitude <= 90):
            raise QueryError(f"Invalid latitude {self.latitude}; expected between -90 and 90.")
        if not (-180 <= self.longitude <= 180):
            raise QueryError(
                f"Invalid longitude {self.longitude}; expected between -180 and 180."
            )
        return self

    @property
    def has_coordinates(self) -> bool:
        return self.address is None

    def location_label(self) -> str:
        if self.address:
            return self.address
        return f"{self.latitude},{self.longitude}"

    def target_timestamp(self) -> int | None:
        """Unix timestamp of midday UTC on the requested date."""
        if self.target_date is None:
            return None
        return int(datetime.combine(self.target_date, time(12, 0), tzinfo=UTC).timestamp())


class Quantity(BaseModel):
    """A numeric value tagged with its unit."""

    model_config = ConfigDict(frozen=True)

    value: float
    unit: str


class ResolvedLocation(BaseModel):
    """Geographic point a result refers to."""

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    region: str | None = None
    country: str | None = None
    latitude: float
    longitude: float


class NormalizedWeatherResult(BaseModel):
    """Provider-agnostic weather record."""

    model_config = ConfigDict(frozen=True)

    source: ProviderChoice
    location: ResolvedLocation
    timeframe: Timeframe
    observed_at: datetime
    temperature: Quantity
    feels_like: Quantity | None = None
    humidity: Quantity | None = None
    pressure: Quantity | None = None
    wind_speed: Quantity | None = None
    wind_direction: Quantity | None = None
    conditions: str
    description: str | None = None

    @field_validator("observed_at")
    @classmethod
    def observed_at_to_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
