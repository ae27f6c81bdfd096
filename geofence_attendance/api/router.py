"""
Main API router
"""
from fastapi import APIRouter

from geofence_attendance.api.v1 import attendance, health, version

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(version.router, tags=["version"])
api_router.include_router(attendance.router, prefix="/attendance", tags=["attendance"])
