"""
Version and metadata endpoint
"""
from fastapi import APIRouter

from geofence_attendance.core.config import settings
from geofence_attendance.core.constants import DEFAULT_VERSION, SERVICE_NAME

router = APIRouter()


@router.get("/version")
async def get_version():
    """
    Get application version and metadata

    Returns:
        Service name, version, environment and the office timezone
    """
    return {
        "service": SERVICE_NAME,
        "version": settings.VERSION or DEFAULT_VERSION,
        "env": settings.APP_ENV,
        "timezone": settings.ATTENDANCE_TZ,
    }
