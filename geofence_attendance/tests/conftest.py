"""
Pytest configuration and fixtures
"""
from datetime import time

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from geofence_attendance.core.config import settings
from geofence_attendance.core.deps import get_clock, get_db
from geofence_attendance.db.base import Base
from geofence_attendance.main import app
from geofence_attendance.services.attendance_state_machine import AttendanceStateMachine
from geofence_attendance.services.geo import Coordinate, OfficeSite, PositionSample
from geofence_attendance.services.status_classifier import WorkWindow
from geofence_attendance.tests.helpers import (
    OFFICE,
    TASHKENT,
    FakeClock,
    InMemoryAttendanceRecordStore,
    local_instant,
)

# Use in-memory SQLite for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def office_site() -> OfficeSite:
    return OfficeSite(coordinate=OFFICE, allowed_radius_meters=100.0, name="Main Office", address="Tashkent")


@pytest.fixture
def work_window() -> WorkWindow:
    # early at or before 08:30, present until 09:15, late afterwards
    return WorkWindow.from_offsets(time(9, 0), late_minutes=15, early_minutes=30)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(local_instant(8, 50))


@pytest.fixture
def memory_store() -> InMemoryAttendanceRecordStore:
    return InMemoryAttendanceRecordStore()


@pytest.fixture
def machine(memory_store, office_site, work_window, clock) -> AttendanceStateMachine:
    return AttendanceStateMachine(
        memory_store,
        office_site,
        work_window,
        max_accuracy_meters=100.0,
        tz=TASHKENT,
        clock=clock,
    )


@pytest.fixture
def good_sample() -> PositionSample:
    return PositionSample(coordinate=OFFICE, accuracy_meters=10.0)


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def api_clock() -> FakeClock:
    """Clock for API tests, 08:50 local in the configured office timezone."""
    return FakeClock(local_instant(8, 50, tz=settings.get_timezone()))


@pytest.fixture
def office_point() -> Coordinate:
    """Configured office coordinate."""
    return settings.get_office_site().coordinate


@pytest.fixture(scope="function")
def client(db, api_clock):
    """Test client fixture with database and clock overrides"""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: api_clock
    yield TestClient(app)
    app.dependency_overrides.clear()
