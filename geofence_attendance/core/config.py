"""
Configuration management for the geofenced attendance service
"""
from datetime import tzinfo
from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from geofence_attendance.services.geo import Coordinate, OfficeSite
from geofence_attendance.services.status_classifier import WorkWindow
from geofence_attendance.utils.datetime_utils import parse_hhmm


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    DATABASE_URL: str = Field(default="sqlite:///./attendance.db", description="SQLAlchemy database URL")

    APP_ENV: str = Field(default="local", description="Application environment: local, staging, prod")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level: DEBUG, INFO, WARNING, ERROR")

    # CORS settings
    ALLOWED_ORIGINS: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins. Use '*' for local only."
    )

    # Deployment timezone: work_date and early/late rules use local wall-clock time; storage is UTC
    ATTENDANCE_TZ: str = Field(default="Asia/Tashkent", description="IANA timezone of the office")

    # Office site (single active site per deployment)
    OFFICE_LATITUDE: float = Field(default=41.2995, ge=-90, le=90)
    OFFICE_LONGITUDE: float = Field(default=69.2401, ge=-180, le=180)
    OFFICE_RADIUS_METERS: float = Field(default=100.0, gt=0, description="Allowed check-in radius in meters")
    OFFICE_NAME: str = Field(default="Main Office")
    OFFICE_ADDRESS: str = Field(default="Tashkent, Uzbekistan")

    # Check-in is rejected when the device-reported accuracy is worse than this (or missing)
    MAX_ACCURACY_METERS: float = Field(default=100.0, gt=0, description="Largest acceptable GPS accuracy radius")

    # Work hours: late after start + LATE_THRESHOLD_MINUTES, early at or before start - EARLY_THRESHOLD_MINUTES
    WORK_START_TIME: str = Field(default="09:00", description="HH:MM local")
    WORK_END_TIME: str = Field(default="18:00", description="HH:MM local")
    LATE_THRESHOLD_MINUTES: int = Field(default=15, ge=0)
    EARLY_THRESHOLD_MINUTES: int = Field(default=30, ge=0)

    # Version (can be git SHA or semver)
    VERSION: Optional[str] = Field(default=None, description="Application version (git SHA or semver)")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"

    @field_validator("APP_ENV")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        """Validate APP_ENV"""
        allowed = ["local", "staging", "prod"]
        if v not in allowed:
            raise ValueError(f"APP_ENV must be one of {allowed}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate LOG_LEVEL"""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of {allowed}")
        return v.upper()

    @field_validator("ATTENDANCE_TZ")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"ATTENDANCE_TZ {v!r} is not a known IANA timezone")
        return v

    @field_validator("WORK_START_TIME", "WORK_END_TIME")
    @classmethod
    def validate_hhmm(cls, v: str) -> str:
        parse_hhmm(v)
        return v.strip()

    def validate_production(self) -> None:
        """
        Validate settings for production environment

        Raises:
            ValueError: If production settings are invalid
        """
        if self.APP_ENV == "prod":
            if self.ALLOWED_ORIGINS == "*" or not self.ALLOWED_ORIGINS:
                raise ValueError(
                    "ALLOWED_ORIGINS must be explicitly set (not '*') in production environment"
                )
            if self.DATABASE_URL.startswith("sqlite"):
                raise ValueError("DATABASE_URL must not be SQLite in production environment")

    def get_allowed_origins_list(self) -> List[str]:
        """
        Get list of allowed CORS origins

        Returns:
            List of allowed origins (or ['*'] for local)
        """
        if self.ALLOWED_ORIGINS == "*":
            return ["*"]
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]

    def get_timezone(self) -> tzinfo:
        return ZoneInfo(self.ATTENDANCE_TZ)

    def get_office_site(self) -> OfficeSite:
        """The active office site for verification"""
        return OfficeSite(
            coordinate=Coordinate(self.OFFICE_LATITUDE, self.OFFICE_LONGITUDE),
            allowed_radius_meters=self.OFFICE_RADIUS_METERS,
            name=self.OFFICE_NAME,
            address=self.OFFICE_ADDRESS,
        )

    def get_work_window(self) -> WorkWindow:
        """Early/late thresholds derived from WORK_START_TIME and the minute offsets"""
        return WorkWindow.from_offsets(
            parse_hhmm(self.WORK_START_TIME),
            late_minutes=self.LATE_THRESHOLD_MINUTES,
            early_minutes=self.EARLY_THRESHOLD_MINUTES,
        )


# Create settings instance
settings = Settings()

# Validate production settings if in prod
if settings.APP_ENV == "prod":
    settings.validate_production()
