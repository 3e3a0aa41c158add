"""Settings loading from environment and `.env`."""

from __future__ import annotations

from pathlib import Path

import pytest

from weather_fetch.config import Settings, load_settings
from weather_fetch.exceptions import ConfigurationError
from weather_fetch.weather.models import ProviderChoice


def test_no_keys_anywhere_raises_configuration_error() -> None:
    with pytest.raises(ConfigurationError, match="No provider API keys configured"):
        load_settings()


def test_keys_load_from_dotenv_file(tmp_path: Path) -> None:
    (tmp_path / ".env").write_text(
        "OPEN_WEATHER_MAP=owm-from-file\nWEATHER_API=wapi-from-file\n", encoding="utf-8"
    )

    settings = load_settings()

    assert settings.configured_providers() == [ProviderChoice.ONE_CALL, ProviderChoice.SIMPLE]
    assert settings.credentials_for(ProviderChoice.SIMPLE).api_key == "wapi-from-file"


def test_environment_overrides_dotenv(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    (tmp_path / ".env").write_text("OPEN_WEATHER_MAP=from-file\n", encoding="utf-8")
    monkeypatch.setenv("OPEN_WEATHER_MAP", "from-env")

    settings = load_settings()

    assert settings.credentials_for(ProviderChoice.ONE_CALL).api_key == "from-env"


def test_empty_key_is_treated_as_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPEN_WEATHER_MAP", "")
    monkeypatch.setenv("WEATHER_API", "wapi-key")

    settings = Settings(_env_file=None)

    assert settings.open_weather_map_api_key is None
    assert settings.configured_providers() == [ProviderChoice.SIMPLE]
    with pytest.raises(ConfigurationError, match="OPEN_WEATHER_MAP"):
        settings.credentials_for(ProviderChoice.ONE_CALL)


def test_default_provider_falls_back_to_first_configured(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("WEATHER_API", "wapi-key")

    settings = Settings(_env_file=None)

    assert settings.resolve_default_provider() is ProviderChoice.SIMPLE


def test_explicit_default_provider_is_respected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPEN_WEATHER_MAP", "owm-key")
    monkeypatch.setenv("WEATHER_API", "wapi-key")
    monkeypatch.setenv("WEATHER_DEFAULT_PROVIDER", "weather-api")

    settings = Settings(_env_file=None)

    assert settings.resolve_default_provider() is ProviderChoice.SIMPLE


def test_invalid_timeout_raises_configuration_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPEN_WEATHER_MAP", "owm-key")
    monkeypatch.setenv("HTTP_TIMEOUT_SECONDS", "0")

    with pytest.raises(ConfigurationError, match="HTTP_TIMEOUT_SECONDS"):
        load_settings()


def test_log_level_is_case_insensitive(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPEN_WEATHER_MAP", "owm-key")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    assert Settings(_env_file=None).log_level == "DEBUG"


def test_safe_summary_excludes_keys(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPEN_WEATHER_MAP", "owm-secret")
    monkeypatch.setenv("WEATHER_API", "wapi-secret")

    settings = Settings(_env_file=None)
    summary = settings.safe_summary()

    assert summary["configured_providers"] == ["open-weather-map", "weather-api"]
    assert summary["default_provider"] == "open-weather-map"
    assert "owm-secret" not in str(summary)
    assert "wapi-secret" not in str(summary)
    assert "owm-secret" not in repr(settings)
