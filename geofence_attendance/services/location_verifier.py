"""
Location verification: distance-within-radius AND accuracy good enough.

A low-accuracy fix can land inside the radius while the device is far outside it,
so acceptance fails closed when the reported accuracy is missing or above the cap.
"""
import enum
from dataclasses import dataclass
from typing import Optional

from geofence_attendance.services.geo import OfficeSite, PositionSample, distance_meters


class RejectionReason(str, enum.Enum):
    OUTSIDE_RADIUS = "outside_radius"
    ACCURACY_TOO_LOW = "accuracy_too_low"


@dataclass(frozen=True)
class VerificationResult:
    distance_meters: float
    within_radius: bool
    accuracy_acceptable: bool
    accepted: bool
    allowed_radius_meters: float
    max_accuracy_meters: float
    accuracy_meters: Optional[float] = None

    @property
    def rejection_reason(self) -> Optional[RejectionReason]:
        """Why the sample was rejected; accuracy takes precedence over distance."""
        if self.accepted:
            return None
        if not self.accuracy_acceptable:
            return RejectionReason.ACCURACY_TOO_LOW
        return RejectionReason.OUTSIDE_RADIUS


def verify(sample: PositionSample, site: OfficeSite, max_accuracy_meters: float) -> VerificationResult:
    """Decide whether a position sample is acceptable for the site. Pure, never raises."""
    distance = distance_meters(sample.coordinate, site.coordinate)
    within_radius = distance <= site.allowed_radius_meters
    accuracy = sample.accuracy_meters
    # None and NaN both fail the comparison
    accuracy_acceptable = accuracy is not None and accuracy <= max_accuracy_meters
    return VerificationResult(
        distance_meters=distance,
        within_radius=within_radius,
        accuracy_acceptable=accuracy_acceptable,
        accepted=within_radius and accuracy_acceptable,
        allowed_radius_meters=site.allowed_radius_meters,
        max_accuracy_meters=max_accuracy_meters,
        accuracy_meters=accuracy,
    )


class LocationVerifier:
    """Verifier bound to one office site and accuracy cap."""

    def __init__(self, site: OfficeSite, max_accuracy_meters: float):
        if not max_accuracy_meters > 0:
            raise ValueError("max_accuracy_meters must be positive")
        self.site = site
        self.max_accuracy_meters = max_accuracy_meters

    def verify(self, sample: PositionSample) -> VerificationResult:
        return verify(sample, self.site, self.max_accuracy_meters)
