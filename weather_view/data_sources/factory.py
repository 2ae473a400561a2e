"""Factory helpers for choosing a forecast data source at startup."""

from __future__ import annotations

from functools import partial

from weather_view import config
from weather_view.data_sources.base import CallableWeatherDataSource, WeatherDataSource
from weather_view.data_sources.openweather_client import fetch_forecast
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/factory")


DEFAULT_SOURCE_NAME = "openweather"


def build_data_source(settings: config.Settings | None = None) -> WeatherDataSource:
    """Instantiate the configured forecast data source."""
    settings = settings or config.settings
    source = (settings.forecast_source or DEFAULT_SOURCE_NAME).lower()

    if source == "openweather":
        if not settings.openweather_api_key:
            raise ValueError("openweather_api_key must be set for the OpenWeather data source")
        logger.info("Using OpenWeather data source", extra={"units": settings.units})
        return CallableWeatherDataSource(
            forecast=partial(
                fetch_forecast,
                api_key=settings.openweather_api_key,
                units=settings.units,
                base_url=settings.openweather_base_url,
                timeout=settings.http_timeout_seconds,
            )
        )

    if source == "file":
        from .file_source import FileForecastDataSource

        path = settings.forecast_file_path
        if not path:
            raise ValueError("forecast_file_path must be set for the file data source")
        logger.info("Using recorded forecast file", extra={"path": path})
        return FileForecastDataSource.from_path(path)

    raise ValueError(f"Unknown forecast source '{source}'")
