"""Exceptions raised by the collaborators of the forecast pipeline."""

from weather_view.domain import ErrorKind


class WeatherAppError(Exception):
    """Base class; ``kind`` is the category surfaced to the user."""
    kind: ErrorKind

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class OfflineError(WeatherAppError):
    """The network was unreachable when the request was made."""
    kind = ErrorKind.NO_CONNECTIVITY


class LocationUnavailableError(WeatherAppError):
    """The device/user location could not be resolved."""
    kind = ErrorKind.LOCATION_UNAVAILABLE


class DataUnavailableError(WeatherAppError):
    """The provider answered but the payload was unusable."""
    kind = ErrorKind.DATA_UNAVAILABLE
