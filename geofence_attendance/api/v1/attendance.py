"""
Attendance endpoints: location-verified check-in, check-out, today/history/day views.
The caller identifies the user by user_id/user_name; identity is not verified here.
"""
import logging
from datetime import date
from typing import Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query, status

from geofence_attendance.core.config import settings
from geofence_attendance.core.deps import (
    get_attendance_state_machine,
    get_location_verifier,
)
from geofence_attendance.schemas.attendance import (
    AttendanceListResponse,
    AttendanceRecordDto,
    CheckInRequest,
    CheckOutRequest,
    CheckOutResponse,
    OfficeDto,
    VerificationDto,
    VerifyLocationRequest,
)
from geofence_attendance.services.attendance_results import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    LocationRejected,
    LocationUnavailable,
    NoCheckInYet,
)
from geofence_attendance.services.attendance_state_machine import AttendanceStateMachine
from geofence_attendance.services.geo import Coordinate, PositionSample
from geofence_attendance.services.location_verifier import LocationVerifier

router = APIRouter()
_log = logging.getLogger(__name__)

_ERROR_STATUS = {
    AlreadyCheckedIn: status.HTTP_409_CONFLICT,
    LocationRejected: status.HTTP_403_FORBIDDEN,
    LocationUnavailable: status.HTTP_422_UNPROCESSABLE_ENTITY,
    NoCheckInYet: status.HTTP_400_BAD_REQUEST,
    AlreadyCheckedOut: status.HTTP_409_CONFLICT,
}


def _resolve_sample(payload: CheckInRequest) -> Union[PositionSample, LocationUnavailable]:
    """Translate the client's geolocation outcome into a sample or LocationUnavailable."""
    if payload.location_error is not None:
        return LocationUnavailable(reason=payload.location_error.value)
    if payload.lat is None or payload.lng is None:
        return LocationUnavailable(reason="position_unavailable")
    return PositionSample(
        coordinate=Coordinate(payload.lat, payload.lng),
        accuracy_meters=payload.accuracy,
        captured_at=payload.captured_at,
    )


def _advisory_sample(payload: CheckOutRequest) -> Optional[PositionSample]:
    """Check-out position, or None when the fields do not describe a usable fix."""
    if payload.location_error is not None or payload.lat is None or payload.lng is None:
        return None
    if not (-90 <= payload.lat <= 90 and -180 <= payload.lng <= 180):
        return None
    # negative or NaN accuracy
    if payload.accuracy is not None and not payload.accuracy >= 0:
        return None
    return PositionSample(
        coordinate=Coordinate(payload.lat, payload.lng),
        accuracy_meters=payload.accuracy,
        captured_at=payload.captured_at,
    )


def _raise_for_error(error) -> None:
    detail = {"code": error.code, "message": error.message}
    if isinstance(error, LocationRejected):
        detail.update(
            reason=error.reason.value,
            distance_meters=round(error.distance_meters, 1),
            accuracy_meters=error.accuracy_meters,
            allowed_radius_meters=error.allowed_radius_meters,
            max_accuracy_meters=error.max_accuracy_meters,
        )
    elif isinstance(error, LocationUnavailable):
        detail["reason"] = error.reason
    raise HTTPException(status_code=_ERROR_STATUS[type(error)], detail=detail)


@router.get("/office", response_model=OfficeDto)
async def office_endpoint():
    """Active office site, radius, accuracy cap and work window."""
    site = settings.get_office_site()
    window = settings.get_work_window()
    return OfficeDto(
        name=site.name,
        address=site.address,
        latitude=site.coordinate.latitude,
        longitude=site.coordinate.longitude,
        allowed_radius_meters=site.allowed_radius_meters,
        max_accuracy_meters=settings.MAX_ACCURACY_METERS,
        timezone=settings.ATTENDANCE_TZ,
        work_start_time=settings.WORK_START_TIME,
        work_end_time=settings.WORK_END_TIME,
        early_threshold=window.early_threshold.strftime("%H:%M"),
        late_threshold=window.late_threshold.strftime("%H:%M"),
    )


@router.post("/verify-location", response_model=VerificationDto)
async def verify_location_endpoint(
    body: VerifyLocationRequest,
    verifier: LocationVerifier = Depends(get_location_verifier),
):
    """Dry-run verification of a position; does not touch attendance records."""
    sample = PositionSample(coordinate=Coordinate(body.lat, body.lng), accuracy_meters=body.accuracy)
    return VerificationDto.from_result(verifier.verify(sample))


@router.post("/check-in", response_model=AttendanceRecordDto, status_code=201)
def check_in_endpoint(
    body: CheckInRequest,
    machine: AttendanceStateMachine = Depends(get_attendance_state_machine),
):
    """
    Check in for today (deployment-timezone work date).
    409 already checked in; 403 location rejected (reason outside_radius / accuracy_too_low);
    422 location unavailable.
    """
    result = machine.request_check_in(body.user_id, body.user_name, _resolve_sample(body))
    if not result.ok:
        _raise_for_error(result.error)
    return AttendanceRecordDto.model_validate(result.record)


@router.post("/check-out", response_model=CheckOutResponse)
def check_out_endpoint(
    body: CheckOutRequest,
    machine: AttendanceStateMachine = Depends(get_attendance_state_machine),
):
    """
    Check out of today's record. Location is advisory: a rejected sample comes back as
    location_warning and an unusable one is ignored. 400 no check-in; 409 already checked out.
    """
    result = machine.request_check_out(body.user_id, _advisory_sample(body))
    if not result.ok:
        _raise_for_error(result.error)
    warning = result.location_warning
    return CheckOutResponse(
        record=AttendanceRecordDto.model_validate(result.record),
        location_warning=VerificationDto.from_result(warning) if warning else None,
    )


@router.get("/today", response_model=Optional[AttendanceRecordDto])
def today_endpoint(
    user_id: str = Query(..., min_length=1),
    machine: AttendanceStateMachine = Depends(get_attendance_state_machine),
):
    """Today's record for the user, or null."""
    record = machine.store.find_by_user_and_day(user_id, machine.today())
    return AttendanceRecordDto.model_validate(record) if record else None


@router.get("/my", response_model=AttendanceListResponse)
def my_endpoint(
    user_id: str = Query(..., min_length=1),
    from_date: date = Query(..., alias="from", description="Start date (YYYY-MM-DD)"),
    to_date: date = Query(..., alias="to", description="End date (YYYY-MM-DD)"),
    machine: AttendanceStateMachine = Depends(get_attendance_state_machine),
):
    """A user's records in the date range, newest first."""
    if from_date > to_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="from must be less than or equal to to",
        )
    records = machine.store.list_for_user(user_id, from_date, to_date)
    return AttendanceListResponse(
        items=[AttendanceRecordDto.model_validate(r) for r in records],
        total=len(records),
    )


@router.get("/day", response_model=AttendanceListResponse)
def day_endpoint(
    work_date: Optional[date] = Query(None, alias="date", description="Work date (YYYY-MM-DD); default today"),
    machine: AttendanceStateMachine = Depends(get_attendance_state_machine),
):
    """All records of one work date, in check-in order."""
    records = machine.store.list_for_day(work_date or machine.today())
    return AttendanceListResponse(
        items=[AttendanceRecordDto.model_validate(r) for r in records],
        total=len(records),
    )
