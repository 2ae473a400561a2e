"""FastAPI application setup for the weather-view service."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from .api import router as api_router
from .forecast_service import ForecastViewModel
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="weather_view/main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the view model once per process unless a test already installed one."""
    if getattr(app.state, "view_model", None) is None:
        app.state.view_model = ForecastViewModel.from_settings()
        logger.info("Forecast view model ready")
    yield


app = FastAPI(title="Weather View", lifespan=lifespan)


@app.get("/health")
def health_check():
    """Liveness probe."""
    return {"status": "ok"}


# API routes
app.include_router(api_router, prefix="/v1")
