"""Application configuration pulled from environment variables via pydantic."""
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger, mask_url
logger = get_tagged_logger(__name__, tag="config")


class Settings(BaseSettings):
    """Environment-driven configuration for the weather-view service."""
    model_config = SettingsConfigDict(env_prefix="WEATHER_", extra="ignore")

    forecast_source: str = "openweather"  # options: openweather, file
    forecast_file_path: str | None = None
    openweather_api_key: str | None = None
    openweather_base_url: str = "https://api.openweathermap.org/data/2.5"
    units: str = "metric"
    # "auto" follows the provider's city offset; otherwise an IANA zone name.
    timezone: str = "auto"

    hourly_count: int = Field(default=8, ge=1)
    hourly_row_height: int = 88
    # Relative humidity is a percentage; the legacy screens label it g/m3.
    humidity_unit: str = "g/m3"

    location_source: str = "static"  # options: static, ip
    default_latitude: float | None = None
    default_longitude: float | None = None
    ip_location_url: str = "http://ip-api.com/json"

    connectivity_probe_url: str = "https://api.openweathermap.org"
    http_timeout_seconds: float = 10.0
    http_retries: int = 5
    cache_expire_seconds: int = 600

    api_key: str | None = None

    @field_validator("openweather_base_url", "ip_location_url", "connectivity_probe_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    dump = settings.model_dump()
    if dump.get("openweather_api_key"):
        dump["openweather_api_key"] = "***"
    logger.debug(f"Loaded settings: {dump}", extra={"base_url": mask_url(settings.openweather_base_url)})
