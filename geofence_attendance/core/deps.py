"""
Dependencies for FastAPI endpoints
"""
from datetime import datetime
from typing import Callable, Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from geofence_attendance.core.config import settings
from geofence_attendance.db.session import SessionLocal
from geofence_attendance.services.attendance_state_machine import AttendanceStateMachine
from geofence_attendance.services.location_verifier import LocationVerifier
from geofence_attendance.services.record_store import SqlAlchemyAttendanceRecordStore
from geofence_attendance.utils.datetime_utils import now_utc


def get_db() -> Generator:
    """Dependency for getting database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_clock() -> Callable[[], datetime]:
    """Source of "now" (server UTC). Overridden in tests with a fixed clock."""
    return now_utc


def get_record_store(db: Session = Depends(get_db)) -> SqlAlchemyAttendanceRecordStore:
    return SqlAlchemyAttendanceRecordStore(db)


def get_location_verifier() -> LocationVerifier:
    return LocationVerifier(settings.get_office_site(), settings.MAX_ACCURACY_METERS)


def get_attendance_state_machine(
    store: SqlAlchemyAttendanceRecordStore = Depends(get_record_store),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> AttendanceStateMachine:
    """State machine wired to the configured office site, work window and timezone."""
    return AttendanceStateMachine(
        store,
        settings.get_office_site(),
        settings.get_work_window(),
        max_accuracy_meters=settings.MAX_ACCURACY_METERS,
        tz=settings.get_timezone(),
        clock=clock,
    )
