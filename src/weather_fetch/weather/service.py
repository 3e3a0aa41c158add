"""Single query entry point over the supported weather providers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .base import WeatherProvider
from .models import NormalizedWeatherResult, ProviderChoice, WeatherQuery
from .open_weather_map import OpenWeatherMapProvider
from .weather_api import WeatherApiProvider

if TYPE_CHECKING:
    from ..config import Settings

PROVIDER_CLASSES: dict[ProviderChoice, type[WeatherProvider]] = {
    ProviderChoice.ONE_CALL: OpenWeatherMapProvider,
    ProviderChoice.SIMPLE: WeatherApiProvider,
}


class WeatherService:
    """Routes each query to the explicitly chosen provider.

    There is no fallback between providers: errors raised by the chosen
    provider propagate unchanged. Provider clients are created on first use
    and reused until `close()`.
    """

    def __init__(self, settings: Settings, logger: logging.Logger) -> None:
        self.settings = settings
        self.logger = logger
        self._providers: dict[ProviderChoice, WeatherProvider] = {}

    def __enter__(self) -> WeatherService:
        return self

    def __exit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        for provider in self._providers.values():
            provider.close()
        self._providers.clear()

    def available_providers(self) -> list[ProviderChoice]:
        return self.settings.configured_providers()

    def query(
        self, request: WeatherQuery, provider_choice: ProviderChoice
    ) -> NormalizedWeatherResult:
        """Fetch normalized weather for `request` from `provider_choice`."""
        provider = self._provider_for(provider_choice)
        self.logger.info(
            "Querying %s for %s weather at %s",
            provider_choice,
            request.target_date.isoformat() if request.target_date else "current",
            request.location_label(),
        )
        return provider.fetch(request)

    def _provider_for(self, choice: ProviderChoice) -> WeatherProvider:
        provider = self._providers.get(choice)
        if provider is None:
            credentials = self.settings.credentials_for(choice)
            provider = PROVIDER_CLASSES[choice](
                credentials=credentials, settings=self.settings, logger=self.logger
            )
            self._providers[choice] = provider
        return provider
