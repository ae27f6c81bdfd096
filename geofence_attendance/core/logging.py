"""
Logging configuration for the geofenced attendance service
"""
import logging
import sys

from geofence_attendance.core.config import settings


def setup_logging() -> None:
    """
    Configure root logging from settings.LOG_LEVEL (stdout, one line per record).
    Third-party loggers are kept at WARNING/INFO so attendance transitions stay readable.
    """
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging configured: level=%s env=%s tz=%s",
        settings.LOG_LEVEL, settings.APP_ENV, settings.ATTENDANCE_TZ,
    )
