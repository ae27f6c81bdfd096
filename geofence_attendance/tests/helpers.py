"""
Shared test helpers: fixed clock, coordinate offsets and an in-memory record store.
"""
import math
import threading
from datetime import date, datetime, time
from typing import Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo

from geofence_attendance.models import AttendanceRecord
from geofence_attendance.services.geo import EARTH_RADIUS_M, Coordinate
from geofence_attendance.utils.datetime_utils import UTC

TASHKENT = ZoneInfo("Asia/Tashkent")
OFFICE = Coordinate(41.2995, 69.2401)


def offset_north(origin: Coordinate, meters: float) -> Coordinate:
    """Point `meters` due north of origin (exact for the haversine sphere)."""
    return Coordinate(origin.latitude + math.degrees(meters / EARTH_RADIUS_M), origin.longitude)


def local_instant(hour: int, minute: int, day: date = date(2026, 3, 10), tz=TASHKENT) -> datetime:
    """UTC instant of a wall-clock time in tz."""
    return datetime.combine(day, time(hour, minute), tzinfo=tz).astimezone(UTC)


class FakeClock:
    """Settable clock returning a fixed UTC instant."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set_local(self, hour: int, minute: int, day: date = date(2026, 3, 10), tz=TASHKENT) -> None:
        self.now = local_instant(hour, minute, day, tz)


class InMemoryAttendanceRecordStore:
    """Thread-safe store double; the lock makes the IfAbsent operations atomic."""

    def __init__(self):
        self._lock = threading.Lock()
        self._by_user_date: Dict[Tuple[str, date], AttendanceRecord] = {}
        self._id = 0

    def find_by_user_and_day(self, user_id: str, work_date: date) -> Optional[AttendanceRecord]:
        return self._by_user_date.get((user_id, work_date))

    def create_if_absent(self, record: AttendanceRecord) -> bool:
        with self._lock:
            key = (record.user_id, record.work_date)
            if key in self._by_user_date:
                return False
            self._id += 1
            record.id = self._id
            self._by_user_date[key] = record
            return True

    def set_check_out_if_absent(self, record_id: int, instant: datetime) -> bool:
        with self._lock:
            for record in self._by_user_date.values():
                if record.id == record_id:
                    if record.check_in_at is None or record.check_out_at is not None:
                        return False
                    record.check_out_at = instant
                    return True
            return False

    def list_for_user(self, user_id: str, from_date: date, to_date: date) -> List[AttendanceRecord]:
        items = [
            r for (uid, d), r in self._by_user_date.items()
            if uid == user_id and from_date <= d <= to_date
        ]
        return sorted(items, key=lambda r: r.work_date, reverse=True)

    def list_for_day(self, work_date: date) -> List[AttendanceRecord]:
        return [r for (_, d), r in self._by_user_date.items() if d == work_date]

    def all(self) -> List[AttendanceRecord]:
        return list(self._by_user_date.values())
