"""
Database session management
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from geofence_attendance.core.config import settings
from geofence_attendance.db.base import Base
import geofence_attendance.models  # noqa: F401  (register tables on Base.metadata)

_is_sqlite = settings.DATABASE_URL.startswith("sqlite")

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    echo=False,
    connect_args={"check_same_thread": False} if _is_sqlite else {},
)

# Create tables automatically on startup for SQLite; other databases use alembic
if _is_sqlite:
    Base.metadata.create_all(bind=engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
