"""
Attendance schemas: check-in/check-out requests, record and verification DTOs.
All response datetimes are ISO-8601 in the deployment timezone (settings.ATTENDANCE_TZ).
"""
import enum
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_serializer, field_validator

from geofence_attendance.core.config import settings
from geofence_attendance.utils.datetime_utils import ensure_utc, iso_local


class LocationErrorCode(str, enum.Enum):
    """Client-side geolocation failures, reported instead of coordinates."""
    PERMISSION_DENIED = "permission_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    TIMEOUT = "timeout"
    UNSUPPORTED = "unsupported"


def _validate_lat(v: Optional[float]) -> Optional[float]:
    if v is None:
        return v
    if not (-90 <= v <= 90):
        raise ValueError("lat must be between -90 and 90")
    return v


def _validate_lng(v: Optional[float]) -> Optional[float]:
    if v is None:
        return v
    if not (-180 <= v <= 180):
        raise ValueError("lng must be between -180 and 180")
    return v


def _validate_accuracy(v: Optional[float]) -> Optional[float]:
    if v is None:
        return v
    if v < 0:
        raise ValueError("accuracy must not be negative")
    return v


class PositionFields(BaseModel):
    """Optional live GPS fields; missing lat/lng or a location_error means no usable position."""
    lat: Optional[float] = Field(None, description="GPS latitude [-90, 90]")
    lng: Optional[float] = Field(None, description="GPS longitude [-180, 180]")
    accuracy: Optional[float] = Field(None, description="Reported accuracy radius in meters; 0 or more")
    captured_at: Optional[datetime] = None
    location_error: Optional[LocationErrorCode] = Field(None, description="Set by the client when geolocation failed")


class CheckInRequest(PositionFields):
    user_id: str = Field(..., min_length=1)
    user_name: str = Field(..., min_length=1)

    @field_validator("lat")
    @classmethod
    def check_lat(cls, v: Optional[float]) -> Optional[float]:
        return _validate_lat(v)

    @field_validator("lng")
    @classmethod
    def check_lng(cls, v: Optional[float]) -> Optional[float]:
        return _validate_lng(v)

    @field_validator("accuracy")
    @classmethod
    def check_accuracy(cls, v: Optional[float]) -> Optional[float]:
        return _validate_accuracy(v)


class CheckOutRequest(PositionFields):
    """Position fields are not range-checked; the endpoint drops an unusable reading."""
    user_id: str = Field(..., min_length=1)
    location_error: Optional[str] = Field(None, description="Set by the client when geolocation failed")


class VerifyLocationRequest(BaseModel):
    lat: float = Field(..., ge=-90, le=90, description="GPS latitude")
    lng: float = Field(..., ge=-180, le=180, description="GPS longitude")
    accuracy: Optional[float] = Field(None, ge=0, description="Reported accuracy radius in meters")


class VerificationDto(BaseModel):
    distance_meters: float
    within_radius: bool
    accuracy_acceptable: bool
    accepted: bool
    rejection_reason: Optional[str] = None
    accuracy_meters: Optional[float] = None
    allowed_radius_meters: float
    max_accuracy_meters: float

    @classmethod
    def from_result(cls, result) -> "VerificationDto":
        return cls(
            distance_meters=round(result.distance_meters, 1),
            within_radius=result.within_radius,
            accuracy_acceptable=result.accuracy_acceptable,
            accepted=result.accepted,
            rejection_reason=result.rejection_reason.value if result.rejection_reason else None,
            accuracy_meters=result.accuracy_meters,
            allowed_radius_meters=result.allowed_radius_meters,
            max_accuracy_meters=result.max_accuracy_meters,
        )


class AttendanceRecordDto(BaseModel):
    """Attendance record output; datetimes in the deployment timezone."""
    id: int
    user_id: str
    user_name: str
    work_date: date
    check_in_at: Optional[datetime] = None
    check_out_at: Optional[datetime] = None
    status: str
    latitude: float
    longitude: float
    accuracy_meters: Optional[float] = None
    distance_meters: Optional[float] = None
    verified: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("status", mode="before")
    @classmethod
    def status_to_str(cls, v):
        return v.value if isinstance(v, enum.Enum) else v

    @computed_field
    @property
    def worked_hours(self) -> Optional[float]:
        """Hours between check-in and check-out, one decimal; None while still checked in."""
        if self.check_in_at is None or self.check_out_at is None:
            return None
        seconds = (ensure_utc(self.check_out_at) - ensure_utc(self.check_in_at)).total_seconds()
        return round(seconds / 3600, 1)

    @field_serializer("check_in_at", "check_out_at", "created_at", "updated_at", when_used="always")
    def _serialize_datetime_local(self, dt: Optional[datetime]) -> Optional[str]:
        return iso_local(dt, settings.get_timezone())


class CheckOutResponse(BaseModel):
    record: AttendanceRecordDto
    location_warning: Optional[VerificationDto] = None


class AttendanceListResponse(BaseModel):
    items: List[AttendanceRecordDto]
    total: int


class OfficeDto(BaseModel):
    name: str
    address: str
    latitude: float
    longitude: float
    allowed_radius_meters: float
    max_accuracy_meters: float
    timezone: str
    work_start_time: str
    work_end_time: str
    early_threshold: str
    late_threshold: str
