"""Application exception classes."""


class ConfigurationError(Exception):
    """Raised when configuration or credentials are missing or invalid."""


class QueryError(Exception):
    """Raised when a weather query is malformed."""


class WeatherProviderError(Exception):
    """Raised when weather provider requests or normalization fail."""


class AuthError(WeatherProviderError):
    """Raised when a provider rejects the configured API key."""


class NetworkError(WeatherProviderError):
    """Raised for transport failures and unavailable upstream services."""


class ParseError(WeatherProviderError):
    """Raised when a provider response does not have the expected shape."""


class LocationNotFoundError(WeatherProviderError):
    """Raised when a provider cannot resolve the requested location."""


class ProviderRequestError(WeatherProviderError):
    """Raised for rejected provider requests with status metadata."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
