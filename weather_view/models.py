"""Pydantic schemas for the OpenWeather 5 day / 3 hour forecast body, plus the decoder into domain samples."""

from __future__ import annotations

from typing import List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from weather_view.domain import City, ForecastSample
from weather_view.errors import DataUnavailableError
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="models")

# 9999-12-31T23:59:59Z, the last instant datetime can represent
MAX_TIMESTAMP = 253402300799


class _Payload(BaseModel):
    """Provider payloads carry many fields we never read."""

    model_config = ConfigDict(extra="ignore")


class MainPayload(_Payload):
    temp: float
    pressure: float
    sea_level: Optional[float] = None
    grnd_level: Optional[float] = None
    humidity: int


class ConditionPayload(_Payload):
    id: Optional[int] = None
    main: Optional[str] = None
    description: str = ""
    icon: str = ""


class WindPayload(_Payload):
    speed: float = 0.0
    deg: int = 0


class ForecastItemPayload(_Payload):
    dt: int = Field(ge=0, le=MAX_TIMESTAMP)
    main: Optional[MainPayload] = None
    weather: List[ConditionPayload] = Field(default_factory=list)
    wind: WindPayload = Field(default_factory=WindPayload)


class CoordPayload(_Payload):
    lat: float
    lon: float


class CityPayload(_Payload):
    name: str = ""
    country: str = ""
    sunrise: Optional[int] = Field(default=None, ge=0, le=MAX_TIMESTAMP)
    sunset: Optional[int] = Field(default=None, ge=0, le=MAX_TIMESTAMP)
    timezone: int = Field(default=0, gt=-86400, lt=86400)  # seconds east of UTC
    coord: Optional[CoordPayload] = None


class ForecastResponse(_Payload):
    """Top-level body: ``{"city": {...}, "list": [...]}``."""
    city: Optional[CityPayload] = None
    items: Optional[List[ForecastItemPayload]] = Field(default=None, alias="list")


def _to_sample(item: ForecastItemPayload) -> ForecastSample:
    """Flatten one list entry; the first weather condition (if any) describes it."""
    condition = item.weather[0] if item.weather else None
    main = item.main
    return ForecastSample(
        timestamp_utc=item.dt,
        temperature=main.temp,
        humidity=main.humidity,
        pressure=main.pressure,
        sea_level_pressure=main.sea_level,
        ground_level_pressure=main.grnd_level,
        wind_speed=item.wind.speed,
        wind_direction=item.wind.deg,
        weather_code=str(condition.id) if condition and condition.id is not None else None,
        description=condition.description if condition else None,
        icon_key=condition.icon if condition else None,
    )


def _to_city(payload: CityPayload) -> City:
    return City(
        name=payload.name,
        country_code=payload.country,
        sunrise=payload.sunrise,
        sunset=payload.sunset,
        timezone_offset=payload.timezone,
        latitude=payload.coord.lat if payload.coord else None,
        longitude=payload.coord.lon if payload.coord else None,
    )


def decode_forecast(raw: Union[bytes, str]) -> Tuple[City, List[ForecastSample]]:
    """Decode a raw provider body into a city and its samples.

    Raises DataUnavailableError when the body is not valid JSON, does not
    match the schema, lacks ``city`` or ``list``, or holds no usable sample.
    Entries without a ``main`` block are skipped.
    """
    try:
        response = ForecastResponse.model_validate_json(raw)
    except ValidationError as exc:
        logger.warning("Forecast payload failed validation", extra={"errors": exc.error_count()})
        raise DataUnavailableError("Forecast payload could not be decoded", {"errors": exc.errors()}) from exc

    if response.city is None or response.items is None:
        missing = [name for name, value in (("city", response.city), ("list", response.items)) if value is None]
        logger.warning("Forecast payload missing required fields", extra={"missing": missing})
        raise DataUnavailableError("Forecast payload is missing required fields", {"missing": missing})

    samples: List[ForecastSample] = []
    skipped = 0
    for item in response.items:
        if item.main is None:
            skipped += 1
            continue
        samples.append(_to_sample(item))

    if skipped:
        logger.debug("Skipped forecast entries without a main block", extra={"skipped": skipped})
    if not samples:
        raise DataUnavailableError("Forecast payload holds no usable samples")

    return _to_city(response.city), samples
