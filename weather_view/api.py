"""HTTP API exposing the forecast snapshot to the presentation layer."""

import hmac
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from pydantic import BaseModel

from .aggregation import ForecastSnapshot
from .config import settings
from .connectivity import OFFLINE_NOTICE
from .domain import City, ErrorKind, ForecastSample, ListViewData, PipelineState, WeatherTableItem, WeatherViewData
from .forecast_service import ForecastViewModel, RefreshOutcome
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="weather_view/api")

ERROR_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.NO_CONNECTIVITY: OFFLINE_NOTICE,
    ErrorKind.LOCATION_UNAVAILABLE: "Your location could not be found.",
    ErrorKind.DATA_UNAVAILABLE: "Weather data could not be loaded.",
}


def require_api_key(x_api_key: str | None = Header(default=None)):
    """Validate X-API-Key against the configured key; open when none is configured."""
    if not settings.api_key:
        return
    if not x_api_key:
        logger.debug("No API key provided")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing API key")
    if hmac.compare_digest(str(x_api_key), str(settings.api_key)):
        return
    logger.debug("Invalid API key provided")
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


def get_view_model(request: Request) -> ForecastViewModel:
    """The view model is created at startup and stored on the application state."""
    return request.app.state.view_model


router = APIRouter(dependencies=[Depends(require_api_key)])


class DayBucket(BaseModel):
    """Samples of one local calendar day, time-ordered."""
    date: str
    samples: List[ForecastSample]


class TableItem(BaseModel):
    item: WeatherTableItem
    height: int


class SnapshotResponse(BaseModel):
    """Serialized snapshot."""
    city: City
    current: WeatherViewData
    hourly: List[WeatherViewData]
    days: List[ListViewData]
    buckets: List[DayBucket]
    table_items: List[TableItem]
    hourly_container_height: int


class RefreshResponse(BaseModel):
    """Outcome of a refresh plus whatever snapshot is on screen afterwards."""
    request_id: int
    state: PipelineState
    is_loading: bool
    data_changed: bool
    discarded: bool
    errors: List[ErrorKind]
    messages: List[str]
    forecast: Optional[SnapshotResponse] = None


def _serialize_snapshot(snapshot: ForecastSnapshot) -> SnapshotResponse:
    return SnapshotResponse(
        city=snapshot.city,
        current=snapshot.current_view,
        hourly=snapshot.hourly_views,
        days=snapshot.day_rows,
        buckets=[
            DayBucket(date=key.isoformat(), samples=sorted(samples, key=lambda s: s.timestamp_utc))
            for key, samples in sorted(snapshot.buckets.items())
        ],
        table_items=[TableItem(item=item, height=item.height) for item in snapshot.table_items],
        hourly_container_height=snapshot.hourly_container_height,
    )


def _serialize_outcome(outcome: RefreshOutcome) -> RefreshResponse:
    return RefreshResponse(
        request_id=outcome.request_id,
        state=outcome.state,
        is_loading=outcome.is_loading,
        data_changed=outcome.data_changed,
        discarded=outcome.discarded,
        errors=list(outcome.errors),
        messages=[ERROR_MESSAGES[kind] for kind in outcome.errors],
        forecast=_serialize_snapshot(outcome.snapshot) if outcome.snapshot else None,
    )


def _require_snapshot(view_model: ForecastViewModel) -> ForecastSnapshot:
    snapshot = view_model.snapshot
    if snapshot is None:
        raise HTTPException(status_code=404, detail="No forecast loaded yet.")
    return snapshot


@router.get("/forecast", response_model=SnapshotResponse)
def get_forecast(view_model: ForecastViewModel = Depends(get_view_model)):
    """Return the snapshot currently on display."""
    return _serialize_snapshot(_require_snapshot(view_model))


@router.post("/forecast/refresh", response_model=RefreshResponse)
def refresh_forecast(view_model: ForecastViewModel = Depends(get_view_model)):
    """Fetch and aggregate a new forecast; failures keep the previous snapshot."""
    outcome = view_model.refresh()
    if outcome.errors:
        logger.info("Refresh reported errors", extra={"errors": [e.value for e in outcome.errors]})
    return _serialize_outcome(outcome)


@router.get("/forecast/days", response_model=List[ListViewData])
def get_days(view_model: ForecastViewModel = Depends(get_view_model)):
    """Rows of the next-days list (one representative sample per day)."""
    return _require_snapshot(view_model).day_rows


@router.post("/forecast/current/{timestamp_utc}", response_model=SnapshotResponse)
def select_current(timestamp_utc: int, view_model: ForecastViewModel = Depends(get_view_model)):
    """Show the sample at ``timestamp_utc`` in the current-weather panel."""
    _require_snapshot(view_model)
    snapshot = view_model.select_current(timestamp_utc)
    if snapshot is None:
        raise HTTPException(status_code=404, detail=f"No forecast sample at {timestamp_utc}")
    return _serialize_snapshot(snapshot)
