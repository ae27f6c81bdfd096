"""
Geofenced attendance service - application entry point
"""
import logging
from urllib.parse import urlparse, urlunparse

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from geofence_attendance.api.router import api_router
from geofence_attendance.core.config import settings
from geofence_attendance.core.constants import DEFAULT_VERSION
from geofence_attendance.core.errors import (
    generic_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from geofence_attendance.core.logging import setup_logging

# Setup logging first
setup_logging()
logger = logging.getLogger(__name__)


def _mask_database_url(url: str) -> str:
    """Mask password in DATABASE_URL for safe logging; show full path for sqlite."""
    parsed = urlparse(url)
    if parsed.scheme.startswith("sqlite") or not parsed.password:
        return url
    netloc = f"{parsed.username}:****@{parsed.hostname or ''}"
    if parsed.port:
        netloc += f":{parsed.port}"
    return urlunparse(parsed._replace(netloc=netloc))


app = FastAPI(
    title="Geofenced Attendance",
    description="Location-verified attendance check-in/check-out",
    version=settings.VERSION or DEFAULT_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register exception handlers
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Include all API routes under /api/v1
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
def startup_log_config() -> None:
    """Log the effective database and office configuration."""
    site = settings.get_office_site()
    logger.info("DATABASE_URL (app): %s", _mask_database_url(settings.DATABASE_URL))
    logger.info(
        "Office site: %s (%.6f, %.6f) radius=%sm max_accuracy=%sm tz=%s",
        site.name, site.coordinate.latitude, site.coordinate.longitude,
        site.allowed_radius_meters, settings.MAX_ACCURACY_METERS, settings.ATTENDANCE_TZ,
    )


def _is_no_such_table(err: BaseException) -> bool:
    return "no such table" in str(err).lower()


async def _handle_operational_error(request, exc: OperationalError):
    """Store unavailable: 500, with a migration hint when the table is missing."""
    if _is_no_such_table(exc):
        logger.error("attendance_records table missing: %s", exc)
        return JSONResponse(
            status_code=500,
            content={
                "error": True,
                "status_code": 500,
                "detail": "Run alembic upgrade head",
                "path": str(request.url.path),
            },
        )
    return await generic_exception_handler(request, exc)


app.add_exception_handler(OperationalError, _handle_operational_error)
