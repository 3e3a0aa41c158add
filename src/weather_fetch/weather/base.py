"""Provider-agnostic weather interface and shared HTTP plumbing."""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING, Any, ClassVar

import httpx

from ..exceptions import (
    AuthError,
    ConfigurationError,
    NetworkError,
    ParseError,
    ProviderRequestError,
    WeatherProviderError,
)
from ..redaction import sanitize_for_logging, sanitize_text
from .models import (
    NormalizedWeatherResult,
    ProviderChoice,
    ProviderCredentials,
    Quantity,
    Timeframe,
    WeatherQuery,
)

if TYPE_CHECKING:
    from ..config import Settings


def utc_today() -> date:
    return datetime.now(UTC).date()


class WeatherProvider(ABC):
    """Base contract for weather providers.

    Subclasses translate a `WeatherQuery` into the provider's HTTP requests and
    parse the response into a `NormalizedWeatherResult`. Each HTTP request is
    issued exactly once; failures surface as typed `WeatherProviderError`s.
    """

    choice: ClassVar[ProviderChoice]

    def __init__(
        self,
        credentials: ProviderCredentials,
        settings: Settings,
        logger: logging.Logger,
        today: Callable[[], date] | None = None,
    ) -> None:
        if credentials.provider is not self.choice:
            raise ConfigurationError(
                f"Credentials for {credentials.provider} cannot be used with {self.choice}."
            )
        api_key = credentials.api_key.strip()
        if not api_key:
            raise ConfigurationError(f"Empty API key configured for {self.choice}.")
        self.settings = settings
        self.logger = logger
        self._api_key = api_key
        self._today = today or utc_today
        self._client = httpx.Client(
            timeout=settings.http_timeout_seconds,
            headers={"Accept": "application/json"},
        )

    def __enter__(self) -> WeatherProvider:
        return self

    def __exit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        """Release provider resources."""
        self._client.close()

    @abstractmethod
    def fetch(self, query: WeatherQuery) -> NormalizedWeatherResult:
        """Fetch and normalize weather for a single query."""

    def _timeframe_for(self, query: WeatherQuery) -> Timeframe:
        if query.target_date is None:
            return "current"
        if query.target_date > self._today():
            return "forecast"
        return "history"

    def _request_json(self, url: str, params: dict[str, Any], context: str) -> Any:
        self.logger.debug(
            "%s %s: GET %s params=%s",
            self.choice,
            context,
            url,
            sanitize_for_logging(params),
        )
        try:
            response = self._client.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise self._status_error(exc.response, context) from exc
        except httpx.TimeoutException as exc:
            raise NetworkError(
                f"{self.choice} {context} timed out after "
                f"{self.settings.http_timeout_seconds:g}s."
            ) from exc
        except httpx.HTTPError as exc:
            raise NetworkError(
                f"{self.choice} {context} request failed: {sanitize_text(str(exc))}"
            ) from exc

        try:
            return response.json()
        except ValueError as exc:
            raise ParseError(f"{self.choice} {context} returned non-JSON response.") from exc

    def _status_error(self, response: httpx.Response, context: str) -> WeatherProviderError:
        """Translate an HTTP error status into a typed provider error."""
        status = response.status_code
        detail = sanitize_text(response.text[:300])
        if status in (401, 403):
            return AuthError(
                f"{self.choice} rejected the API key during {context} "
                f"(HTTP {status}): {detail}"
            )
        if status == 429 or status >= 500:
            return NetworkError(
                f"{self.choice} {context} unavailable (HTTP {status}): {detail}"
            )
        return ProviderRequestError(
            f"{self.choice} {context} failed with status {status}: {detail}",
            status_code=status,
        )

    def _require_dict(self, payload: Any, key: str, context: str) -> dict[str, Any]:
        value = payload.get(key) if isinstance(payload, dict) else None
        if not isinstance(value, dict):
            raise ParseError(f"{self.choice} {context} payload missing '{key}' object.")
        return value

    @staticmethod
    def _as_str(value: Any) -> str | None:
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None

    @staticmethod
    def _as_float(value: Any) -> float | None:
        # bool is an int subclass; a flag is never a measurement.
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            return None
        try:
            number = float(value)
        except OverflowError:
            return None
        # JSON bodies may carry NaN/Infinity tokens.
        return number if math.isfinite(number) else None

    @classmethod
    def _quantity(cls, value: Any, unit: str, scale: float = 1.0) -> Quantity | None:
        number = cls._as_float(value)
        if number is None:
            return None
        if scale != 1.0:
            number = round(number * scale, 2)
        return Quantity(value=number, unit=unit)

    @classmethod
    def _parse_epoch(cls, value: Any) -> datetime | None:
        seconds = cls._as_float(value)
        if seconds is None:
            return None
        try:
            return datetime.fromtimestamp(seconds, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
