import os

import uvicorn

from utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="server")


if __name__ == "__main__":
    setup_logging(level=os.getenv("WEATHER_LOG_LEVEL", "INFO"), job_name="weather_view")
    logger.info("Starting weather-view server")

    uvicorn.run(
        "weather_view.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        reload=False,
    )
