"""
Attendance record model: one row per (user, work_date), created by check-in, closed by check-out.
"""
import enum

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Enum as SQLEnum,
    Float,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from geofence_attendance.db.base import Base


class AttendanceStatus(str, enum.Enum):
    PRESENT = "present"
    LATE = "late"
    EARLY = "early"
    ABSENT = "absent"  # set only by end-of-day reconciliation, never by check-in


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    user_name = Column(String, nullable=False)
    work_date = Column(Date, nullable=False, index=True)  # deployment-timezone calendar day
    check_in_at = Column(DateTime(timezone=True), nullable=True)  # UTC
    check_out_at = Column(DateTime(timezone=True), nullable=True)  # UTC, >= check_in_at
    status = Column(
        SQLEnum(
            AttendanceStatus,
            name="attendance_status",
            native_enum=False,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )
    latitude = Column(Float, nullable=False)  # captured at check-in
    longitude = Column(Float, nullable=False)
    accuracy_meters = Column(Float, nullable=True)
    distance_meters = Column(Float, nullable=True)  # distance to office at check-in
    verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "work_date", name="uq_attendance_records_user_work_date"),
    )

    def __repr__(self) -> str:
        return f"<AttendanceRecord id={self.id} user_id={self.user_id} work_date={self.work_date} status={self.status}>"
