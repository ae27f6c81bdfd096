"""
Check-in status classification (early / present / late) against a configured work window.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo

from geofence_attendance.models.attendance import AttendanceStatus
from geofence_attendance.utils.datetime_utils import to_local


@dataclass(frozen=True)
class WorkWindow:
    """
    Local times-of-day that bound the check-in statuses.

    check-in <= early_threshold                     -> early
    early_threshold < check-in <= late_threshold    -> present
    check-in > late_threshold                       -> late
    """
    start_time: time
    late_threshold: time
    early_threshold: time

    def __post_init__(self):
        if self.early_threshold > self.late_threshold:
            raise ValueError("early_threshold must not be after late_threshold")

    @classmethod
    def from_offsets(cls, start_time: time, late_minutes: int, early_minutes: int) -> "WorkWindow":
        """Build thresholds as start_time + late_minutes and start_time - early_minutes (same day)."""
        anchor = datetime.combine(date(2000, 1, 1), start_time)
        late = anchor + timedelta(minutes=late_minutes)
        early = anchor - timedelta(minutes=early_minutes)
        if late.date() != anchor.date() or early.date() != anchor.date():
            raise ValueError("work window thresholds must fall on the same day as start_time")
        return cls(start_time=start_time, late_threshold=late.time(), early_threshold=early.time())


def classify(check_in_at: datetime, window: WorkWindow, tz: tzinfo) -> AttendanceStatus:
    """Status for a check-in instant. Never returns ABSENT (end-of-day reconciliation only)."""
    local_time = to_local(check_in_at, tz).time()
    if local_time <= window.early_threshold:
        return AttendanceStatus.EARLY
    if local_time <= window.late_threshold:
        return AttendanceStatus.PRESENT
    return AttendanceStatus.LATE


class AttendanceStatusClassifier:
    def __init__(self, window: WorkWindow, tz: tzinfo):
        self.window = window
        self.tz = tz

    def classify(self, check_in_at: datetime) -> AttendanceStatus:
        return classify(check_in_at, self.window, self.tz)
