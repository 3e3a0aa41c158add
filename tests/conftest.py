"""Shared fixtures: keep provider keys and `.env` out of every test."""

from __future__ import annotations

from pathlib import Path

import pytest

_ENV_VARS = (
    "OPEN_WEATHER_MAP",
    "WEATHER_API",
    "WEATHER_DEFAULT_PROVIDER",
    "HTTP_TIMEOUT_SECONDS",
    "LOG_LEVEL",
    "OPENWEATHERMAP_API_BASE_URL",
    "OPENWEATHERMAP_GEO_BASE_URL",
    "WEATHERAPI_BASE_URL",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
