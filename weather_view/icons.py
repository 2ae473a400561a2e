"""Map OpenWeather icon codes ("01d", "10n"...) onto the local SF-symbol style icon set."""

from typing import Dict, Optional

DEFAULT_ICON = "questionmark.circle"

ICON_NAMES: Dict[str, str] = {
    "01d": "sun.max",
    "01n": "moon",
    "02d": "cloud.sun",
    "02n": "cloud.moon",
    "03d": "cloud",
    "03n": "cloud",
    "04d": "smoke",
    "04n": "smoke",
    "09d": "cloud.drizzle",
    "09n": "cloud.drizzle",
    "10d": "cloud.sun.rain",
    "10n": "cloud.moon.rain",
    "11d": "cloud.bolt",
    "11n": "cloud.bolt",
    "13d": "snow",
    "13n": "snow",
    "50d": "cloud.fog",
    "50n": "cloud.fog",
}


def icon_name(code: Optional[str]) -> str:
    """Return the local icon key for ``code``; unknown or missing codes get DEFAULT_ICON."""
    if not code:
        return DEFAULT_ICON
    return ICON_NAMES.get(code.strip().lower(), DEFAULT_ICON)
