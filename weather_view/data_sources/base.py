"""Interfaces and helpers for forecast data sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol


class WeatherDataSource(Protocol):
    """Anything that returns the raw forecast body for a coordinate pair.

    Implementations raise ``OfflineError`` when the network is unreachable and
    ``DataUnavailableError`` when the provider answers with an error.
    """

    def fetch_forecast(self, latitude: float, longitude: float) -> bytes:
        """Return the undecoded forecast body."""
        ...


@dataclass
class CallableWeatherDataSource(WeatherDataSource):
    """Wrap a callable so backends (and test fakes) can be swapped freely."""

    forecast: Callable[[float, float], bytes]

    def fetch_forecast(self, latitude: float, longitude: float) -> bytes:
        return self.forecast(latitude, longitude)
