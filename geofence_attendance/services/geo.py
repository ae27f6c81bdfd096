"""
Geographic value types and great-circle distance.
"""
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

# Mean Earth radius in meters (spherical approximation)
EARTH_RADIUS_M = 6_371_000.0


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class PositionSample:
    """One device position fix. accuracy_meters is None when the device reported no accuracy."""
    coordinate: Coordinate
    accuracy_meters: Optional[float] = None
    captured_at: Optional[datetime] = None


@dataclass(frozen=True)
class OfficeSite:
    """Reference point and allowed radius for check-in."""
    coordinate: Coordinate
    allowed_radius_meters: float
    name: str = ""
    address: str = ""

    def __post_init__(self):
        if not self.allowed_radius_meters > 0:
            raise ValueError("allowed_radius_meters must be positive")


def distance_meters(a: Coordinate, b: Coordinate) -> float:
    """
    Great-circle distance between two coordinates in meters (haversine formula).

    Symmetric, and 0 for identical points.
    """
    phi1 = math.radians(a.latitude)
    phi2 = math.radians(b.latitude)
    dphi = math.radians(b.latitude - a.latitude)
    dlambda = math.radians(b.longitude - a.longitude)

    h = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    # clamp: rounding can push h slightly above 1 for antipodal points
    h = min(1.0, h)
    return EARTH_RADIUS_M * 2 * math.asin(math.sqrt(h))
