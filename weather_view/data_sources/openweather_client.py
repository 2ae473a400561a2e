"""Fetch the 5 day / 3 hour forecast body from the OpenWeather API."""
from __future__ import annotations

import requests
import requests_cache
from retry_requests import retry

from weather_view.config import settings
from weather_view.errors import DataUnavailableError, OfflineError
from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="openweather_client")

cache_session = requests_cache.CachedSession(".cache", expire_after=settings.cache_expire_seconds)
session = retry(cache_session, retries=settings.http_retries, backoff_factor=0.2)

FORECAST_PATH = "/forecast"


def fetch_forecast(
    latitude: float,
    longitude: float,
    *,
    api_key: str | None = None,
    units: str = "metric",
    base_url: str | None = None,
    timeout: float | None = None,
) -> bytes:
    """Return the raw JSON body of the forecast for the given coordinates.

    Connection failures and timeouts surface as OfflineError; HTTP error
    statuses (bad key, unknown location, server errors) and any other
    request failure as DataUnavailableError.
    Decoding is left to the caller.
    """
    url = f"{(base_url or settings.openweather_base_url).rstrip('/')}{FORECAST_PATH}"
    params = {
        "lat": latitude,
        "lon": longitude,
        "units": units,
        "appid": api_key if api_key is not None else settings.openweather_api_key,
    }

    logger.info(
        "Requesting OpenWeather forecast",
        extra={"url": mask_url(url), "latitude": latitude, "longitude": longitude, "units": units},
    )
    try:
        resp = session.get(url, params=params, timeout=timeout or settings.http_timeout_seconds)
        resp.raise_for_status()
        body = resp.content
    except (requests.ConnectionError, requests.Timeout) as exc:
        logger.warning("OpenWeather unreachable", extra={"error": str(exc)})
        raise OfflineError("Weather service is unreachable", {"error": str(exc)}) from exc
    except (requests.HTTPError, requests.exceptions.RetryError) as exc:
        logger.warning("OpenWeather returned an error status", extra={"error": str(exc)})
        raise DataUnavailableError("Weather service returned an error", {"error": str(exc)}) from exc
    except requests.RequestException as exc:
        logger.warning("OpenWeather request failed", extra={"error": repr(exc)})
        raise DataUnavailableError("Weather service request failed", {"error": str(exc)}) from exc

    logger.debug(
        "Received OpenWeather forecast",
        extra={"bytes": len(body), "from_cache": getattr(resp, "from_cache", False)},
    )
    return body
