"""
Timezone-aware datetime helpers.
- Store and compute instants in UTC.
- Work dates and time-of-day rules use the deployment timezone (settings.ATTENDANCE_TZ).
"""
from datetime import date, datetime, time, timezone, tzinfo
from typing import Optional

UTC = timezone.utc


def now_utc() -> datetime:
    """Current time in UTC (timezone-aware). Default clock for check-in/check-out."""
    return datetime.now(UTC)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """If dt is naive, treat as UTC and return timezone-aware UTC. If already aware, convert to UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def to_local(dt: Optional[datetime], tz: tzinfo) -> Optional[datetime]:
    """Convert to the deployment timezone. Naive datetimes are treated as UTC (SQLite returns naive)."""
    if dt is None:
        return None
    return ensure_utc(dt).astimezone(tz)


def iso_local(dt: Optional[datetime], tz: tzinfo) -> Optional[str]:
    """ISO-8601 in the deployment timezone, with explicit offset. Used for API responses."""
    local = to_local(dt, tz)
    return local.isoformat() if local else None


def get_work_date(instant: datetime, tz: tzinfo) -> date:
    """Calendar day of the instant in the deployment timezone; the per-user-per-day record key."""
    return ensure_utc(instant).astimezone(tz).date()


def parse_hhmm(value: str) -> time:
    """
    Parse a 'HH:MM' string into a time.

    Raises:
        ValueError: if value is not a valid 24h HH:MM string
    """
    try:
        hours, minutes = value.strip().split(":")
        return time(int(hours), int(minutes))
    except (AttributeError, ValueError, TypeError):
        raise ValueError(f"Invalid time {value!r}, expected HH:MM")
