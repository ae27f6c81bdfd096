"""
Attendance state machine: per (user, work_date) lifecycle NoRecord -> CheckedIn -> CheckedOut.

Check-in is fail-closed on location; check-out only reports location as an advisory warning
(a worker leaving the site is often already outside the radius).
All instants are server UTC from the injected clock; work_date is the deployment-timezone day.
"""
import logging
from datetime import date, datetime, tzinfo
from typing import Callable, Optional, Union

from geofence_attendance.models.attendance import AttendanceRecord
from geofence_attendance.services.attendance_results import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    CheckInResult,
    CheckOutResult,
    LocationRejected,
    LocationUnavailable,
    NoCheckInYet,
)
from geofence_attendance.services.geo import OfficeSite, PositionSample
from geofence_attendance.services.location_verifier import LocationVerifier
from geofence_attendance.services.record_store import AttendanceRecordStore
from geofence_attendance.services.status_classifier import AttendanceStatusClassifier, WorkWindow
from geofence_attendance.utils.datetime_utils import ensure_utc, get_work_date, now_utc

_log = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class AttendanceStateMachine:
    def __init__(
        self,
        store: AttendanceRecordStore,
        site: OfficeSite,
        work_window: WorkWindow,
        *,
        max_accuracy_meters: float,
        tz: tzinfo,
        clock: Clock = now_utc,
    ):
        self.store = store
        self.verifier = LocationVerifier(site, max_accuracy_meters)
        self.classifier = AttendanceStatusClassifier(work_window, tz)
        self.tz = tz
        self.clock = clock

    def today(self) -> date:
        """Current work date in the deployment timezone."""
        return get_work_date(self.clock(), self.tz)

    def request_check_in(
        self,
        user_id: str,
        user_name: str,
        sample: Union[PositionSample, LocationUnavailable],
        now: Optional[datetime] = None,
    ) -> CheckInResult:
        """
        Check in for today.

        Order: existing check-in -> location availability -> location verification ->
        status classification -> atomic create. Failures leave the store untouched.
        """
        now = ensure_utc(now or self.clock())
        work_date = get_work_date(now, self.tz)

        existing = self.store.find_by_user_and_day(user_id, work_date)
        if existing is not None and existing.check_in_at is not None:
            _log.info("check_in rejected: already checked in user_id=%s work_date=%s", user_id, work_date)
            return CheckInResult(error=AlreadyCheckedIn())

        if isinstance(sample, LocationUnavailable):
            _log.warning("check_in rejected: location unavailable user_id=%s reason=%s", user_id, sample.reason)
            return CheckInResult(error=sample)

        verification = self.verifier.verify(sample)
        if not verification.accepted:
            _log.warning(
                "check_in rejected: user_id=%s reason=%s distance=%.1fm accuracy=%s",
                user_id, verification.rejection_reason.value,
                verification.distance_meters, sample.accuracy_meters,
            )
            return CheckInResult(
                error=LocationRejected(
                    reason=verification.rejection_reason,
                    distance_meters=verification.distance_meters,
                    accuracy_meters=sample.accuracy_meters,
                    allowed_radius_meters=verification.allowed_radius_meters,
                    max_accuracy_meters=verification.max_accuracy_meters,
                )
            )

        status = self.classifier.classify(now)
        record = AttendanceRecord(
            user_id=user_id,
            user_name=user_name,
            work_date=work_date,
            check_in_at=now,
            check_out_at=None,
            status=status,
            latitude=sample.coordinate.latitude,
            longitude=sample.coordinate.longitude,
            accuracy_meters=sample.accuracy_meters,
            distance_meters=verification.distance_meters,
            verified=True,
        )
        # a concurrent duplicate may have created the record since the read above
        if not self.store.create_if_absent(record):
            _log.info("check_in rejected: concurrent duplicate user_id=%s work_date=%s", user_id, work_date)
            return CheckInResult(error=AlreadyCheckedIn())

        _log.info(
            "check_in: user_id=%s work_date=%s status=%s distance=%.1fm",
            user_id, work_date, status.value, verification.distance_meters,
        )
        return CheckInResult(record=record)

    def request_check_out(
        self,
        user_id: str,
        sample: Optional[PositionSample] = None,
        now: Optional[datetime] = None,
    ) -> CheckOutResult:
        """
        Check out of today's record.

        A sample, when given, is verified for the caller's information only; a rejected
        sample is returned as location_warning and the check-out still succeeds.
        """
        now = ensure_utc(now or self.clock())
        work_date = get_work_date(now, self.tz)

        record = self.store.find_by_user_and_day(user_id, work_date)
        if record is None or record.check_in_at is None:
            _log.info("check_out rejected: no check-in user_id=%s work_date=%s", user_id, work_date)
            return CheckOutResult(error=NoCheckInYet())
        if record.check_out_at is not None:
            _log.info("check_out rejected: already checked out user_id=%s work_date=%s", user_id, work_date)
            return CheckOutResult(error=AlreadyCheckedOut())

        warning = None
        if sample is not None:
            verification = self.verifier.verify(sample)
            if not verification.accepted:
                warning = verification
                _log.warning(
                    "check_out outside verified location: user_id=%s reason=%s distance=%.1fm",
                    user_id, verification.rejection_reason.value, verification.distance_meters,
                )

        check_in_at = ensure_utc(record.check_in_at)
        if now < check_in_at:
            _log.warning("check_out before check_in (clock skew), clamping: user_id=%s", user_id)
            now = check_in_at

        if not self.store.set_check_out_if_absent(record.id, now):
            _log.info("check_out rejected: concurrent duplicate user_id=%s work_date=%s", user_id, work_date)
            return CheckOutResult(error=AlreadyCheckedOut())

        _log.info("check_out: user_id=%s work_date=%s", user_id, work_date)
        return CheckOutResult(
            record=self.store.find_by_user_and_day(user_id, work_date),
            location_warning=warning,
        )
