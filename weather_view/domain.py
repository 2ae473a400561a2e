"""Domain vocabulary for the forecast display pipeline.

Samples and cities are immutable once decoded; view-data models are the
presentation contract handed to the HTTP layer. No aggregation logic lives
here.
"""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Dict, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict


class _FrozenModel(BaseModel):
    """Base model that rejects unknown fields and mutation."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class ErrorKind(str, Enum):
    """User-facing failure categories; each is reported on its own."""
    NO_CONNECTIVITY = "no_connectivity"
    LOCATION_UNAVAILABLE = "location_unavailable"
    DATA_UNAVAILABLE = "data_unavailable"


class PipelineState(str, Enum):
    """States of the fetch-to-display pipeline."""
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    FAILURE = "failure"


class ConnectivityStatus(str, Enum):
    """Network reachability as last observed."""
    ONLINE = "online"
    OFFLINE = "offline"


class WeatherTableItem(str, Enum):
    """Sections of the main screen, in display order."""
    CITY_INFO = "city_info"
    WEATHER_INFO = "weather_info"
    NEXT_DAY = "next_day"
    HOURLY_INFO = "hourly_info"
    SUN_DETAIL = "sun_detail"
    WIND_DETAIL = "wind_detail"

    @property
    def height(self) -> int:
        return TABLE_ROW_HEIGHTS[self]


TABLE_ROW_HEIGHTS: Dict[WeatherTableItem, int] = {
    WeatherTableItem.CITY_INFO: 60,
    WeatherTableItem.WEATHER_INFO: 206,
    WeatherTableItem.NEXT_DAY: 98,
    WeatherTableItem.HOURLY_INFO: 200,
    WeatherTableItem.SUN_DETAIL: 200,
    WeatherTableItem.WIND_DETAIL: 200,
}


class DateKey(NamedTuple):
    """A local calendar day, ordered chronologically."""
    year: int
    month: int
    day: int

    @classmethod
    def from_timestamp(cls, timestamp_utc: int, tz: dt.tzinfo) -> "DateKey":
        local = dt.datetime.fromtimestamp(timestamp_utc, tz)
        return cls(local.year, local.month, local.day)

    def midnight(self, tz: dt.tzinfo) -> dt.datetime:
        """Reference instant of the key: local midnight."""
        return dt.datetime(self.year, self.month, self.day, tzinfo=tz)

    def isoformat(self) -> str:
        return dt.date(self.year, self.month, self.day).isoformat()


class Coordinates(_FrozenModel):
    """A resolved (latitude, longitude) pair."""
    latitude: float
    longitude: float


class ForecastSample(_FrozenModel):
    """One forecast observation at a fixed UTC instant."""
    timestamp_utc: int
    temperature: float  # °C
    humidity: int  # relative %
    pressure: float  # hPa
    sea_level_pressure: Optional[float] = None
    ground_level_pressure: Optional[float] = None
    wind_speed: float
    wind_direction: int  # degrees, 0-359
    weather_code: Optional[str] = None
    description: Optional[str] = None
    icon_key: Optional[str] = None

    @property
    def has_condition(self) -> bool:
        return self.weather_code is not None or self.description is not None or self.icon_key is not None

    def local_time(self, tz: dt.tzinfo) -> dt.datetime:
        return dt.datetime.fromtimestamp(self.timestamp_utc, tz)


class City(_FrozenModel):
    """Location descriptor shipped with a forecast."""
    name: str
    country_code: str
    sunrise: Optional[int] = None
    sunset: Optional[int] = None
    timezone_offset: int = 0  # seconds east of UTC
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @property
    def location_text(self) -> str:
        if self.country_code:
            return f"{self.name}, {self.country_code}"
        return self.name

    def tzinfo(self) -> dt.timezone:
        """Fixed-offset zone the provider reports for this city."""
        return dt.timezone(dt.timedelta(seconds=self.timezone_offset))


class WeatherViewData(_FrozenModel):
    """Display strings for the "current weather" panels."""
    timestamp_utc: int
    city_name: str = ""
    country_name: str = ""
    location_text: str = ""
    weather_state: str = ""
    weather_degree: str = ""
    weather_icon: str = ""
    sunrise_value: str = ""
    sunset_value: str = ""
    wind_speed_value: str = ""
    wind_degree_value: str = ""
    ground_level_value: str = ""
    pressure_value: str = ""
    see_level_value: str = ""
    humidity_value: str = ""


class ListViewData(_FrozenModel):
    """Display strings for one row of the next-days list."""
    timestamp_utc: int
    day_name: str
    icon: str
    degree: str
    wind_speed: str
    humidity: str
    pressure: str
    wind_degree: str
