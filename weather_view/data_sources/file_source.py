"""Serve a forecast body from a JSON file on disk (offline development, demos)."""

from __future__ import annotations

from pathlib import Path

from weather_view.data_sources.base import WeatherDataSource
from weather_view.errors import DataUnavailableError
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="file_data_source")


class FileForecastDataSource(WeatherDataSource):
    """Return the same recorded provider body for every coordinate."""

    def __init__(self, path: Path) -> None:
        self.path = path

    @classmethod
    def from_path(cls, path: str) -> "FileForecastDataSource":
        return cls(Path(path).expanduser())

    def fetch_forecast(self, latitude: float, longitude: float) -> bytes:
        logger.debug(
            "Reading recorded forecast",
            extra={"path": str(self.path), "latitude": latitude, "longitude": longitude},
        )
        try:
            return self.path.read_bytes()
        except OSError as exc:
            raise DataUnavailableError(f"Cannot read forecast file {self.path}", {"error": str(exc)}) from exc
