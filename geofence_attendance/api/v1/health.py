"""
Health check endpoint
"""
from fastapi import APIRouter

from geofence_attendance.core.constants import SERVICE_NAME

router = APIRouter()


@router.get("/health")
async def health_check():
    """Liveness probe; does not touch the database."""
    return {
        "status": "ok",
        "service": SERVICE_NAME,
    }
