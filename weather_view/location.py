"""Location providers: resolve the viewer's coordinates once per request."""
from __future__ import annotations

from typing import Protocol

import requests

from weather_view import config
from weather_view.domain import Coordinates
from weather_view.errors import LocationUnavailableError
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="location")

session = requests.Session()

DEFAULT_LOCATION_SOURCE = "static"


class LocationProvider(Protocol):
    """Yields a single coordinate pair or raises LocationUnavailableError."""

    def resolve(self) -> Coordinates:
        ...


class StaticLocationProvider(LocationProvider):
    """Fixed coordinates, typically from configuration."""

    def __init__(self, latitude: float | None, longitude: float | None) -> None:
        self.latitude = latitude
        self.longitude = longitude

    def resolve(self) -> Coordinates:
        if self.latitude is None or self.longitude is None:
            raise LocationUnavailableError("No default coordinates configured")
        return Coordinates(latitude=self.latitude, longitude=self.longitude)


class IpLocationProvider(LocationProvider):
    """Approximate the location from the public IP via a geo-IP JSON endpoint."""

    def __init__(self, url: str, *, timeout: float = 5.0) -> None:
        self.url = url
        self.timeout = timeout

    def resolve(self) -> Coordinates:
        try:
            resp = session.get(self.url, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Geo-IP lookup failed", extra={"url": self.url, "error": str(exc)})
            raise LocationUnavailableError("Geo-IP lookup failed", {"error": str(exc)}) from exc

        if data.get("status", "success") != "success":
            raise LocationUnavailableError("Geo-IP lookup returned no location", {"message": data.get("message")})

        lat = data.get("lat", data.get("latitude"))
        lon = data.get("lon", data.get("longitude"))
        if lat is None or lon is None:
            raise LocationUnavailableError("Geo-IP response has no coordinates")

        logger.debug("Resolved location from IP", extra={"latitude": lat, "longitude": lon})
        return Coordinates(latitude=lat, longitude=lon)


def build_location_provider(settings: config.Settings | None = None) -> LocationProvider:
    """Instantiate the configured location provider."""
    settings = settings or config.settings
    source = (settings.location_source or DEFAULT_LOCATION_SOURCE).lower()

    if source == "static":
        logger.info("Using static location", extra={"latitude": settings.default_latitude,
                                                     "longitude": settings.default_longitude})
        return StaticLocationProvider(settings.default_latitude, settings.default_longitude)

    if source == "ip":
        logger.info("Using geo-IP location", extra={"url": settings.ip_location_url})
        return IpLocationProvider(settings.ip_location_url, timeout=settings.http_timeout_seconds)

    raise ValueError(f"Unknown location source '{source}'")
