"""Fetch normalized weather from open-weather-map or weather-api."""

__version__ = "0.1.0"
