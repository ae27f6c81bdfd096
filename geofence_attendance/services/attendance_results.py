"""
Typed outcomes of check-in / check-out. Expected failures are values, not exceptions.
"""
from dataclasses import dataclass
from typing import ClassVar, Optional, Union

from geofence_attendance.models.attendance import AttendanceRecord
from geofence_attendance.services.location_verifier import RejectionReason, VerificationResult


@dataclass(frozen=True)
class AlreadyCheckedIn:
    code: ClassVar[str] = "already_checked_in"
    message: ClassVar[str] = "Already checked in today"


@dataclass(frozen=True)
class LocationRejected:
    reason: RejectionReason
    distance_meters: float
    accuracy_meters: Optional[float]
    allowed_radius_meters: float
    max_accuracy_meters: float

    code: ClassVar[str] = "location_rejected"

    @property
    def message(self) -> str:
        if self.reason == RejectionReason.ACCURACY_TOO_LOW:
            if self.accuracy_meters is None:
                return "Location accuracy unknown; enable precise location and try again"
            return (
                f"Location accuracy {round(self.accuracy_meters)}m is worse than the allowed "
                f"{round(self.max_accuracy_meters)}m"
            )
        return (
            f"You are {round(self.distance_meters)}m from the office; "
            f"allowed radius is {round(self.allowed_radius_meters)}m"
        )


@dataclass(frozen=True)
class LocationUnavailable:
    """Device could not produce a position (permission denied, timeout, no signal...)."""
    reason: str = "position_unavailable"

    code: ClassVar[str] = "location_unavailable"

    @property
    def message(self) -> str:
        return f"Location unavailable: {self.reason}"


@dataclass(frozen=True)
class NoCheckInYet:
    code: ClassVar[str] = "no_check_in_yet"
    message: ClassVar[str] = "No check-in for today"


@dataclass(frozen=True)
class AlreadyCheckedOut:
    code: ClassVar[str] = "already_checked_out"
    message: ClassVar[str] = "Already checked out today"


CheckInError = Union[AlreadyCheckedIn, LocationRejected, LocationUnavailable]
CheckOutError = Union[NoCheckInYet, AlreadyCheckedOut]


@dataclass
class CheckInResult:
    record: Optional[AttendanceRecord] = None
    error: Optional[CheckInError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class CheckOutResult:
    record: Optional[AttendanceRecord] = None
    error: Optional[CheckOutError] = None
    # set when the check-out sample would have been rejected at check-in; advisory only
    location_warning: Optional[VerificationResult] = None

    @property
    def ok(self) -> bool:
        return self.error is None
