"""
Attendance record store: durable per-(user, work_date) records.

Check-in and check-out are expressed as atomic conditional writes
(create-if-absent, set-check-out-if-absent), never as read-then-write.
"""
import logging
from datetime import date, datetime
from typing import List, Optional, Protocol

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from geofence_attendance.models.attendance import AttendanceRecord

_log = logging.getLogger(__name__)


class AttendanceRecordStore(Protocol):
    def find_by_user_and_day(self, user_id: str, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create_if_absent(self, record: AttendanceRecord) -> bool:
        """Persist record unless one already exists for (user_id, work_date). True if created."""
        raise NotImplementedError

    def set_check_out_if_absent(self, record_id: int, instant: datetime) -> bool:
        """Set check_out_at only if it is still empty. True if this call set it."""
        raise NotImplementedError

    def list_for_user(self, user_id: str, from_date: date, to_date: date) -> List[AttendanceRecord]:
        raise NotImplementedError

    def list_for_day(self, work_date: date) -> List[AttendanceRecord]:
        raise NotImplementedError


class SqlAlchemyAttendanceRecordStore:
    """
    Store backed by the attendance_records table.

    Atomicity comes from the database: the (user_id, work_date) unique constraint
    decides which concurrent check-in wins, and check-out is a single conditional UPDATE.
    Database errors other than the unique violation propagate unchanged.
    """

    def __init__(self, db: Session):
        self.db = db

    def find_by_user_and_day(self, user_id: str, work_date: date) -> Optional[AttendanceRecord]:
        return (
            self.db.query(AttendanceRecord)
            .filter(
                AttendanceRecord.user_id == user_id,
                AttendanceRecord.work_date == work_date,
            )
            .first()
        )

    def create_if_absent(self, record: AttendanceRecord) -> bool:
        self.db.add(record)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            # only the (user_id, work_date) conflict means "already exists"
            if self.find_by_user_and_day(record.user_id, record.work_date) is None:
                raise
            _log.info(
                "create_if_absent lost race: user_id=%s work_date=%s",
                record.user_id, record.work_date,
            )
            return False
        self.db.refresh(record)
        return True

    def set_check_out_if_absent(self, record_id: int, instant: datetime) -> bool:
        updated = (
            self.db.query(AttendanceRecord)
            .filter(
                AttendanceRecord.id == record_id,
                AttendanceRecord.check_in_at.isnot(None),
                AttendanceRecord.check_out_at.is_(None),
            )
            .update({AttendanceRecord.check_out_at: instant}, synchronize_session=False)
        )
        self.db.commit()
        return updated == 1

    def list_for_user(self, user_id: str, from_date: date, to_date: date) -> List[AttendanceRecord]:
        return (
            self.db.query(AttendanceRecord)
            .filter(
                AttendanceRecord.user_id == user_id,
                AttendanceRecord.work_date >= from_date,
                AttendanceRecord.work_date <= to_date,
            )
            .order_by(AttendanceRecord.work_date.desc())
            .all()
        )

    def list_for_day(self, work_date: date) -> List[AttendanceRecord]:
        return (
            self.db.query(AttendanceRecord)
            .filter(AttendanceRecord.work_date == work_date)
            .order_by(AttendanceRecord.check_in_at.asc())
            .all()
        )
