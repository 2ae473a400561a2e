"""Reshape a flat forecast time-series into day buckets, an hourly strip and per-day summaries.

Everything here is a pure function of its inputs and the timezone passed in;
callers may run it on any thread.
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from weather_view.domain import (
    City,
    DateKey,
    ForecastSample,
    ListViewData,
    WeatherTableItem,
    WeatherViewData,
)
from weather_view.icons import icon_name
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="aggregation")

DEFAULT_HOURLY_COUNT = 8  # ~24h at the provider's 3h cadence
DEFAULT_HUMIDITY_UNIT = "g/m3"
TABLE_ITEMS: Tuple[WeatherTableItem, ...] = tuple(WeatherTableItem)

DayBuckets = Dict[DateKey, List[ForecastSample]]


def _by_time(samples: Iterable[ForecastSample]) -> List[ForecastSample]:
    return sorted(samples, key=lambda s: s.timestamp_utc)


def bucket_by_local_day(samples: Iterable[ForecastSample], tz: dt.tzinfo) -> DayBuckets:
    """Group samples by the local calendar day of their timestamp.

    Membership order inside a bucket follows the input; readers sort.
    """
    buckets: DayBuckets = {}
    for sample in samples:
        key = DateKey.from_timestamp(sample.timestamp_utc, tz)
        buckets.setdefault(key, []).append(sample)
    return buckets


def select_today_hourly(samples: Iterable[ForecastSample], count: int = DEFAULT_HOURLY_COUNT) -> List[ForecastSample]:
    """Earliest ``count`` samples in time order (not filtered to the current day)."""
    if count <= 0:
        return []
    return _by_time(samples)[:count]


def select_daily_representatives(buckets: DayBuckets) -> List[ForecastSample]:
    """One sample per day, days ascending.

    The representative is the structural midpoint ``len // 2`` of the day's
    time-sorted samples, an approximation of midday rather than a search for
    the sample nearest noon. Empty buckets produce nothing.
    """
    representatives: List[ForecastSample] = []
    for key in sorted(buckets):
        day_samples = buckets[key]
        if not day_samples:
            continue
        ordered = _by_time(day_samples)
        representatives.append(ordered[len(ordered) // 2])
    return representatives


def _with_unit(value, unit: str) -> str:
    if value is None:
        return ""
    return f"{value} {unit}" if unit else f"{value}"


def _clock(timestamp: Optional[int], tz: dt.tzinfo) -> str:
    if timestamp is None:
        return ""
    return dt.datetime.fromtimestamp(timestamp, tz).strftime("%H:%M")


def _capitalize_words(text: Optional[str]) -> str:
    if not text:
        return ""
    return " ".join(word.capitalize() for word in text.split(" "))


def format_view_data(
    sample: ForecastSample,
    city: Optional[City] = None,
    *,
    tz: dt.tzinfo = dt.timezone.utc,
    humidity_unit: str = DEFAULT_HUMIDITY_UNIT,
) -> WeatherViewData:
    """Derive the display strings for ``sample``.

    A sample without a weather condition keeps an empty state and the default
    icon; a missing city leaves the city and sun fields empty.
    """
    return WeatherViewData(
        timestamp_utc=sample.timestamp_utc,
        city_name=city.name if city else "",
        country_name=city.country_code if city else "",
        location_text=city.location_text if city else "",
        weather_state=_capitalize_words(sample.description),
        weather_degree=f"{sample.temperature}",
        weather_icon=icon_name(sample.icon_key),
        sunrise_value=_clock(city.sunrise, tz) if city else "",
        sunset_value=_clock(city.sunset, tz) if city else "",
        wind_speed_value=_with_unit(sample.wind_speed, "km/h"),
        wind_degree_value=_with_unit(sample.wind_direction, "°"),
        ground_level_value=_with_unit(sample.ground_level_pressure, ""),
        pressure_value=_with_unit(sample.pressure, "hPa"),
        see_level_value=_with_unit(sample.sea_level_pressure, "MSL"),
        humidity_value=_with_unit(sample.humidity, humidity_unit),
    )


def format_list_view_data(
    sample: ForecastSample,
    *,
    tz: dt.tzinfo = dt.timezone.utc,
    humidity_unit: str = DEFAULT_HUMIDITY_UNIT,
) -> ListViewData:
    """Row strings for the next-days list."""
    return ListViewData(
        timestamp_utc=sample.timestamp_utc,
        day_name=sample.local_time(tz).strftime("%A"),
        icon=icon_name(sample.icon_key),
        degree=f"{sample.temperature} °C",
        wind_speed=f"{sample.wind_speed} km/h",
        humidity=f"{sample.humidity} {humidity_unit}",
        pressure=f"{sample.pressure} hPa",
        wind_degree=f"{sample.wind_direction} °",
    )


@dataclass(frozen=True)
class ForecastSnapshot:
    """Everything the screens render for one successful fetch."""
    city: City
    tz: dt.tzinfo
    buckets: DayBuckets
    hourly: List[ForecastSample]
    daily: List[ForecastSample]
    current: ForecastSample
    current_view: WeatherViewData
    hourly_views: List[WeatherViewData]
    day_rows: List[ListViewData]
    hourly_container_height: int
    table_items: Tuple[WeatherTableItem, ...] = field(default=TABLE_ITEMS)

    def find_sample(self, timestamp_utc: int) -> Optional[ForecastSample]:
        for samples in self.buckets.values():
            for sample in samples:
                if sample.timestamp_utc == timestamp_utc:
                    return sample
        return None

    def is_current_sample(self, sample: ForecastSample) -> bool:
        return sample.timestamp_utc == self.current.timestamp_utc


def resolve_timezone(city: City, timezone: Optional[dt.tzinfo]) -> dt.tzinfo:
    """Use the explicit viewer zone when given, otherwise the city's own offset."""
    return timezone if timezone is not None else city.tzinfo()


def build_snapshot(
    city: City,
    samples: Sequence[ForecastSample],
    *,
    timezone: Optional[dt.tzinfo] = None,
    hourly_count: int = DEFAULT_HOURLY_COUNT,
    hourly_row_height: int = 88,
    humidity_unit: str = DEFAULT_HUMIDITY_UNIT,
) -> ForecastSnapshot:
    """Run the full aggregation once over an immutable sample list.

    The earliest sample becomes the "current" one.
    """
    if not samples:
        raise ValueError("build_snapshot needs at least one sample")

    tz = resolve_timezone(city, timezone)
    buckets = bucket_by_local_day(samples, tz)
    hourly = select_today_hourly(samples, hourly_count)
    daily = select_daily_representatives(buckets)
    current = hourly[0] if hourly else _by_time(samples)[0]

    logger.debug(
        "Aggregated forecast",
        extra={"samples": len(samples), "days": len(buckets), "hourly": len(hourly), "daily": len(daily)},
    )

    return ForecastSnapshot(
        city=city,
        tz=tz,
        buckets=buckets,
        hourly=hourly,
        daily=daily,
        current=current,
        current_view=format_view_data(current, city, tz=tz, humidity_unit=humidity_unit),
        hourly_views=[format_view_data(s, city, tz=tz, humidity_unit=humidity_unit) for s in hourly],
        day_rows=[format_list_view_data(s, tz=tz, humidity_unit=humidity_unit) for s in daily],
        hourly_container_height=len(hourly) * hourly_row_height,
    )


def with_current(snapshot: ForecastSnapshot, sample: ForecastSample, humidity_unit: str = DEFAULT_HUMIDITY_UNIT) -> ForecastSnapshot:
    """Copy of ``snapshot`` with ``sample`` promoted to the current panel."""
    return ForecastSnapshot(
        city=snapshot.city,
        tz=snapshot.tz,
        buckets=snapshot.buckets,
        hourly=snapshot.hourly,
        daily=snapshot.daily,
        current=sample,
        current_view=format_view_data(sample, snapshot.city, tz=snapshot.tz, humidity_unit=humidity_unit),
        hourly_views=snapshot.hourly_views,
        day_rows=snapshot.day_rows,
        hourly_container_height=snapshot.hourly_container_height,
        table_items=snapshot.table_items,
    )
