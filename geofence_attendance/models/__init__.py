"""
Database models
"""
from geofence_attendance.models.attendance import AttendanceRecord, AttendanceStatus

__all__ = [
    "AttendanceRecord",
    "AttendanceStatus",
]
