"""Data source factories for plugging different forecast backends."""

from .base import CallableWeatherDataSource, WeatherDataSource
from .factory import build_data_source
from .file_source import FileForecastDataSource
from .openweather_client import fetch_forecast

__all__ = [
    "build_data_source",
    "CallableWeatherDataSource",
    "FileForecastDataSource",
    "WeatherDataSource",
    "fetch_forecast",
]
