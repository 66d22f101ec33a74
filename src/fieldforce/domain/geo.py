"""Coordinates and great-circle distance."""

import math
from dataclasses import dataclass

EARTH_RADIUS_M = 6_371_000.0


@dataclass(frozen=True)
class Coordinate:
    """Latitude/longitude pair in degrees."""

    lat: float
    lng: float

    def as_dict(self) -> dict[str, float]:
        """Return the coordinate as a JSON-friendly mapping."""
        return {"lat": self.lat, "lng": self.lng}

    @classmethod
    def from_dict(cls, raw: dict[str, object] | None) -> "Coordinate | None":
        """Build a coordinate from a stored mapping, if present."""
        if not raw:
            return None
        return cls(lat=float(raw["lat"]), lng=float(raw["lng"]))


# Destinations that were never pinned are stored as (0, 0).
UNSET_COORDINATE = Coordinate(lat=0.0, lng=0.0)


def is_unset(coordinate: Coordinate | None) -> bool:
    """Return true when the coordinate is missing or the unknown-site sentinel."""
    return coordinate is None or (coordinate.lat == 0 and coordinate.lng == 0)


def distance_meters(a: Coordinate, b: Coordinate) -> float:
    """Return the Haversine distance between two coordinates in meters."""
    phi1 = math.radians(a.lat)
    phi2 = math.radians(b.lat)
    d_phi = math.radians(b.lat - a.lat)
    d_lambda = math.radians(b.lng - a.lng)

    h = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    # Rounding can push h a hair above 1 for antipodal points.
    h = min(1.0, h)
    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(h), math.sqrt(1 - h))
