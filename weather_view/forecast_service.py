"""Fetch-to-display pipeline: resolve location, fetch, decode, aggregate, publish a snapshot."""
from __future__ import annotations

import datetime as dt
import threading
from dataclasses import dataclass
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo

from weather_view import config
from weather_view.aggregation import ForecastSnapshot, build_snapshot, with_current
from weather_view.connectivity import ConnectivityMonitor
from weather_view.data_sources import WeatherDataSource, build_data_source
from weather_view.domain import ConnectivityStatus, ErrorKind, PipelineState
from weather_view.errors import DataUnavailableError, LocationUnavailableError, OfflineError
from weather_view.location import LocationProvider, build_location_provider
from weather_view.models import decode_forecast
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="forecast_service")


@dataclass(frozen=True)
class RefreshOutcome:
    """Result of one refresh attempt.

    ``is_loading``, ``data_changed`` and ``errors`` are independent channels:
    a refresh can succeed and still carry a connectivity warning, and a failed
    refresh leaves the previous (stale) snapshot in place.
    """
    request_id: int
    state: PipelineState
    is_loading: bool
    data_changed: bool
    errors: Tuple[ErrorKind, ...]
    discarded: bool = False
    snapshot: Optional[ForecastSnapshot] = None


def _report(errors: List[ErrorKind], kind: ErrorKind) -> None:
    if kind not in errors:
        errors.append(kind)


def resolve_viewer_timezone(name: str | None) -> Optional[dt.tzinfo]:
    """``None``/``"auto"`` means "use the city's offset"; anything else is an IANA name."""
    if not name or name == "auto":
        return None
    return ZoneInfo(name)


class ForecastViewModel:
    """Owns the latest snapshot for one screen and runs refreshes against injected collaborators.

    Each refresh gets a monotonically increasing request id. A successful
    result is applied only if no newer result has been applied already, so a
    slow early request cannot overwrite a fresher one.
    """

    def __init__(
        self,
        data_source: WeatherDataSource,
        location_provider: LocationProvider,
        connectivity: ConnectivityMonitor | None = None,
        *,
        timezone: dt.tzinfo | None = None,
        hourly_count: int = 8,
        hourly_row_height: int = 88,
        humidity_unit: str = "g/m3",
    ) -> None:
        self.data_source = data_source
        self.location_provider = location_provider
        self.connectivity = connectivity
        self.timezone = timezone
        self.hourly_count = hourly_count
        self.hourly_row_height = hourly_row_height
        self.humidity_unit = humidity_unit

        self._lock = threading.Lock()
        self._state = PipelineState.IDLE
        self._in_flight = 0
        self._last_request_id = 0
        self._applied_request_id = 0
        self._snapshot: Optional[ForecastSnapshot] = None

    @classmethod
    def from_settings(
        cls,
        settings: config.Settings | None = None,
        *,
        data_source: WeatherDataSource | None = None,
        location_provider: LocationProvider | None = None,
        connectivity: ConnectivityMonitor | None = None,
    ) -> "ForecastViewModel":
        """Wire the view model from configuration, building any collaborator not passed in."""
        settings = settings or config.settings
        return cls(
            data_source or build_data_source(settings),
            location_provider or build_location_provider(settings),
            connectivity or ConnectivityMonitor(probe_url=settings.connectivity_probe_url),
            timezone=resolve_viewer_timezone(settings.timezone),
            hourly_count=settings.hourly_count,
            hourly_row_height=settings.hourly_row_height,
            humidity_unit=settings.humidity_unit,
        )

    @property
    def state(self) -> PipelineState:
        with self._lock:
            return self._state

    @property
    def is_loading(self) -> bool:
        with self._lock:
            return self._in_flight > 0

    @property
    def snapshot(self) -> Optional[ForecastSnapshot]:
        with self._lock:
            return self._snapshot

    def refresh(self) -> RefreshOutcome:
        """Run one fetch-and-aggregate attempt; loading is always cleared afterwards."""
        request_id = self._begin()
        errors: List[ErrorKind] = []
        snapshot: Optional[ForecastSnapshot] = None
        try:
            snapshot = self._fetch_and_aggregate(request_id, errors)
        finally:
            outcome = self._finish(request_id, snapshot, errors)
        return outcome

    def select_current(self, timestamp_utc: int) -> Optional[ForecastSnapshot]:
        """Promote the sample at ``timestamp_utc`` to the current panel; None if unknown."""
        with self._lock:
            snapshot = self._snapshot
            if snapshot is None:
                return None
            sample = snapshot.find_sample(timestamp_utc)
            if sample is None:
                return None
            self._snapshot = with_current(snapshot, sample, humidity_unit=self.humidity_unit)
            return self._snapshot

    def _begin(self) -> int:
        with self._lock:
            self._last_request_id += 1
            request_id = self._last_request_id
            self._in_flight += 1
            self._state = PipelineState.LOADING
        logger.debug("Refresh started", extra={"request_id": request_id})
        return request_id

    def _fetch_and_aggregate(self, request_id: int, errors: List[ErrorKind]) -> Optional[ForecastSnapshot]:
        if self.connectivity is not None and self.connectivity.probe_url:
            self.connectivity.probe()
        if self.connectivity is not None and self.connectivity.is_offline:
            # informational only; the fetch is still attempted
            logger.warning("Refreshing while offline", extra={"request_id": request_id})
            _report(errors, ErrorKind.NO_CONNECTIVITY)

        try:
            coordinates = self.location_provider.resolve()
        except LocationUnavailableError as exc:
            logger.warning("Location unavailable; skipping fetch",
                           extra={"request_id": request_id, "error": exc.message})
            _report(errors, exc.kind)
            return None

        try:
            raw = self.data_source.fetch_forecast(coordinates.latitude, coordinates.longitude)
        except OfflineError as exc:
            if self.connectivity is not None:
                self.connectivity.set_status(ConnectivityStatus.OFFLINE)
            logger.warning("Forecast fetch failed: offline", extra={"request_id": request_id, "error": exc.message})
            _report(errors, exc.kind)
            return None
        except DataUnavailableError as exc:
            logger.warning("Forecast provider returned an error", extra={"request_id": request_id, "error": exc.message})
            _report(errors, exc.kind)
            return None

        if self.connectivity is not None:
            self.connectivity.set_status(ConnectivityStatus.ONLINE)

        try:
            city, samples = decode_forecast(raw)
            return build_snapshot(
                city,
                samples,
                timezone=self.timezone,
                hourly_count=self.hourly_count,
                hourly_row_height=self.hourly_row_height,
                humidity_unit=self.humidity_unit,
            )
        except (ValueError, OverflowError, OSError) as exc:
            # timestamps or offsets the calendar cannot represent
            logger.warning("Forecast data out of range", extra={"request_id": request_id, "error": str(exc)})
            _report(errors, ErrorKind.DATA_UNAVAILABLE)
            return None
        except DataUnavailableError as exc:
            logger.warning("Forecast data unavailable", extra={"request_id": request_id, "error": exc.message})
            _report(errors, exc.kind)
            return None

    def _finish(self, request_id: int, snapshot: Optional[ForecastSnapshot], errors: List[ErrorKind]) -> RefreshOutcome:
        data_changed = False
        discarded = False
        with self._lock:
            self._in_flight -= 1
            if snapshot is not None:
                if request_id > self._applied_request_id:
                    self._snapshot = snapshot
                    self._applied_request_id = request_id
                    data_changed = True
                else:
                    discarded = True
            state = PipelineState.SUCCESS if snapshot is not None else PipelineState.FAILURE
            self._state = PipelineState.LOADING if self._in_flight else PipelineState.IDLE
            is_loading = self._in_flight > 0
            current = self._snapshot

        logger.info(
            "Refresh finished",
            extra={
                "request_id": request_id,
                "state": state.value,
                "data_changed": data_changed,
                "discarded": discarded,
                "errors": [e.value for e in errors],
            },
        )
        return RefreshOutcome(
            request_id=request_id,
            state=state,
            is_loading=is_loading,
            data_changed=data_changed,
            errors=tuple(errors),
            discarded=discarded,
            snapshot=current,
        )
