"""Typed settings loader for weather-fetch."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import AnyUrl, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError
from .weather.models import ProviderChoice, ProviderCredentials


class Settings(BaseSettings):
    """Application settings loaded from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    open_weather_map_api_key: str | None = Field(
        default=None, alias="OPEN_WEATHER_MAP", repr=False
    )
    weather_api_api_key: str | None = Field(default=None, alias="WEATHER_API", repr=False)

    default_provider: ProviderChoice | None = Field(
        default=None, alias="WEATHER_DEFAULT_PROVIDER"
    )
    http_timeout_seconds: float = Field(default=5.0, alias="HTTP_TIMEOUT_SECONDS")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING", alias="LOG_LEVEL"
    )

    openweathermap_api_base_url: AnyUrl = Field(
        default="https://api.openweathermap.org",
        validate_default=True,
        alias="OPENWEATHERMAP_API_BASE_URL",
    )
    openweathermap_geo_base_url: AnyUrl = Field(
        default="http://api.openweathermap.org",
        validate_default=True,
        alias="OPENWEATHERMAP_GEO_BASE_URL",
    )
    weatherapi_base_url: AnyUrl = Field(
        default="http://api.weatherapi.com",
        validate_default=True,
        alias="WEATHERAPI_BASE_URL",
    )

    @field_validator(
        "open_weather_map_api_key",
        "weather_api_api_key",
        "default_provider",
        mode="before",
    )
    @classmethod
    def empty_string_to_none(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return None
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @model_validator(mode="after")
    def validate_settings(self) -> Settings:
        if self.http_timeout_seconds <= 0:
            raise ValueError("HTTP_TIMEOUT_SECONDS must be > 0.")
        if not self.configured_providers():
            names = ", ".join(choice.env_var for choice in ProviderChoice)
            raise ValueError(
                f"No provider API keys configured. Set at least one of {names} "
                "in the environment or the .env file in the current folder."
            )
        return self

    def api_key_for(self, choice: ProviderChoice) -> str | None:
        if choice is ProviderChoice.ONE_CALL:
            return self.open_weather_map_api_key
        return self.weather_api_api_key

    def configured_providers(self) -> list[ProviderChoice]:
        """Providers with a non-empty API key, in declaration order."""
        return [choice for choice in ProviderChoice if self.api_key_for(choice)]

    def credentials_for(self, choice: ProviderChoice) -> ProviderCredentials:
        """Return credentials for a provider or raise ConfigurationError."""
        api_key = self.api_key_for(choice)
        if not api_key:
            raise ConfigurationError(
                f"Failed to get api key for {choice} provider. "
                f"Set {choice.env_var} in the environment or the .env file."
            )
        return ProviderCredentials(provider=choice, api_key=api_key)

    def resolve_default_provider(self) -> ProviderChoice:
        """Configured default, or the first provider that has a key."""
        configured = self.configured_providers()
        preferred = self.default_provider or ProviderChoice.default()
        if preferred in configured:
            return preferred
        return configured[0]

    def safe_summary(self) -> dict[str, Any]:
        """Return config summary safe for logging (no credentials)."""
        return {
            "configured_providers": [str(choice) for choice in self.configured_providers()],
            "default_provider": str(self.resolve_default_provider()),
            "http_timeout_seconds": self.http_timeout_seconds,
            "log_level": self.log_level,
            "openweathermap_api_base_url": str(self.openweathermap_api_base_url),
            "openweathermap_geo_base_url": str(self.openweathermap_geo_base_url),
            "weatherapi_base_url": str(self.weatherapi_base_url),
        }


def load_settings(**overrides: Any) -> Settings:
    """Load and validate settings, raising ConfigurationError on failure."""
    try:
        return Settings(**overrides)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc
    except OSError as exc:
        raise ConfigurationError(f"Failed reading environment/.env: {exc}") from exc
