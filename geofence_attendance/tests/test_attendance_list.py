"""
Tests for attendance views: today, per-user history and per-day list
"""
from datetime import date

import pytest
from fastapi import status

from geofence_attendance.core.deps import get_record_store
from geofence_attendance.main import app
from geofence_attendance.models.attendance import AttendanceRecord, AttendanceStatus
from geofence_attendance.tests.helpers import InMemoryAttendanceRecordStore, local_instant


@pytest.fixture
def history(db):
    """Three days for u1 and one for u2, stored directly."""
    rows = [
        ("u1", date(2026, 3, 8), (8, 40), (17, 40), AttendanceStatus.PRESENT),
        ("u1", date(2026, 3, 9), (9, 30), None, AttendanceStatus.LATE),
        ("u1", date(2026, 3, 10), (8, 20), None, AttendanceStatus.EARLY),
        ("u2", date(2026, 3, 10), (8, 55), None, AttendanceStatus.PRESENT),
    ]
    for user_id, work_date, check_in, check_out, status_ in rows:
        db.add(AttendanceRecord(
            user_id=user_id,
            user_name=user_id.upper(),
            work_date=work_date,
            check_in_at=local_instant(*check_in, day=work_date),
            check_out_at=local_instant(*check_out, day=work_date) if check_out else None,
            status=status_,
            latitude=41.2995,
            longitude=69.2401,
            accuracy_meters=10.0,
            distance_meters=0.0,
            verified=True,
        ))
    db.commit()


def test_today_returns_record(client, history):
    response = client.get("/api/v1/attendance/today", params={"user_id": "u1"})
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["work_date"] == "2026-03-10"
    assert data["status"] == "early"


def test_today_without_record_is_null(client, db):
    response = client.get("/api/v1/attendance/today", params={"user_id": "nobody"})
    assert response.status_code == status.HTTP_200_OK
    assert response.json() is None


def test_my_history_newest_first(client, history):
    response = client.get(
        "/api/v1/attendance/my",
        params={"user_id": "u1", "from": "2026-03-01", "to": "2026-03-31"},
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["total"] == 3
    assert [item["work_date"] for item in data["items"]] == ["2026-03-10", "2026-03-09", "2026-03-08"]
    assert data["items"][2]["worked_hours"] == 9.0


def test_my_history_respects_range(client, history):
    response = client.get(
        "/api/v1/attendance/my",
        params={"user_id": "u1", "from": "2026-03-09", "to": "2026-03-09"},
    )
    data = response.json()
    assert data["total"] == 1
    assert data["items"][0]["status"] == "late"


def test_my_history_from_after_to(client, db):
    response = client.get(
        "/api/v1/attendance/my",
        params={"user_id": "u1", "from": "2026-03-10", "to": "2026-03-01"},
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_my_history_requires_dates(client, db):
    response = client.get("/api/v1/attendance/my", params={"user_id": "u1"})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_day_list_in_check_in_order(client, history):
    response = client.get("/api/v1/attendance/day", params={"date": "2026-03-10"})
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["total"] == 2
    assert [item["user_id"] for item in data["items"]] == ["u1", "u2"]


def test_day_list_defaults_to_today(client, history):
    data = client.get("/api/v1/attendance/day").json()
    assert data["total"] == 2
    assert all(item["work_date"] == "2026-03-10" for item in data["items"])


def test_day_list_empty(client, history):
    data = client.get("/api/v1/attendance/day", params={"date": "2026-03-01"}).json()
    assert data == {"items": [], "total": 0}


def test_read_endpoints_share_record_store(client, db, api_clock):
    """today, my and day all read through the injected record store."""
    store = InMemoryAttendanceRecordStore()
    store.create_if_absent(AttendanceRecord(
        user_id="mem",
        user_name="Memory",
        work_date=date(2026, 3, 10),
        check_in_at=local_instant(8, 45),
        status=AttendanceStatus.PRESENT,
        latitude=41.2995,
        longitude=69.2401,
        accuracy_meters=5.0,
        distance_meters=0.0,
        verified=True,
    ))
    app.dependency_overrides[get_record_store] = lambda: store

    today = client.get("/api/v1/attendance/today", params={"user_id": "mem"}).json()
    history = client.get(
        "/api/v1/attendance/my",
        params={"user_id": "mem", "from": "2026-03-01", "to": "2026-03-31"},
    ).json()
    day = client.get("/api/v1/attendance/day").json()

    assert today["user_id"] == "mem"
    assert [item["user_id"] for item in history["items"]] == ["mem"]
    assert [item["user_id"] for item in day["items"]] == ["mem"]
