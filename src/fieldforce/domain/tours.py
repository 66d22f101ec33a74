"""Domain models for tours and visits."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from fieldforce.domain.geo import Coordinate


class TourStatus(StrEnum):
    """Lifecycle of a tour."""

    UPCOMING = "Upcoming"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CLAIMED = "Claimed"


class TourPhase(StrEnum):
    """Leg of an in-progress tour."""

    OUTWARD = "OUTWARD"
    ON_SITE = "ON_SITE"
    RETURN = "RETURN"


class TransportMode(StrEnum):
    """How the employee travels."""

    BIKE = "Bike"
    CAR = "Car"
    BUS = "Bus"


class TravelType(StrEnum):
    """Whether the trip is shared."""

    INDIVIDUAL = "Individual"
    POOL = "Pool"


class PoolRole(StrEnum):
    """Role within a shared trip."""

    DRIVER = "Driver"
    PASSENGER = "Passenger"


class ClaimStatus(StrEnum):
    """Payment state of an expense claim."""

    PAID = "Paid"
    DUE = "Due"


@dataclass(frozen=True)
class ExpenseItem:
    """A receipt-backed expense attached to a claim."""

    id: str
    category: str
    amount: float
    description: str = ""
    receipt: str | None = None


@dataclass(frozen=True)
class CheckpointOverride:
    """A checkpoint accepted outside the allowed radius."""

    phase: TourPhase
    distance_meters: float | None
    recorded_at: datetime


@dataclass(frozen=True)
class TourPlan:
    """Travel details collected when a tour starts."""

    transport_mode: TransportMode
    travel_type: TravelType = TravelType.INDIVIDUAL
    pool_role: PoolRole | None = None
    project_id: str | None = None
    task_name: str | None = None
    task_description: str | None = None
    to_location: str | None = None
    bad_weather: bool = False
    surrounding_video_url: str | None = None

    @property
    def requires_surrounding_video(self) -> bool:
        """Cars and buses in fine weather must upload a 360 degree video."""
        return not self.bad_weather and self.transport_mode in {
            TransportMode.CAR,
            TransportMode.BUS,
        }


@dataclass(frozen=True)
class Tour:
    """A planned or executed trip to a site."""

    id: str
    project_id: str
    project_name: str
    task_name: str
    from_location: str
    to_location: str
    to_coordinate: Coordinate | None
    start_date: datetime
    end_date: datetime
    status: TourStatus
    task_description: str | None = None
    advance_amount: float | None = None
    advance_reason: str | None = None
    phase: TourPhase | None = None
    actual_start_date: datetime | None = None
    site_arrival_time: datetime | None = None
    return_start_time: datetime | None = None
    actual_end_date: datetime | None = None
    transport_mode: TransportMode | None = None
    travel_type: TravelType | None = None
    pool_role: PoolRole | None = None
    vehicle_plate_photo: str | None = None
    surrounding_video_url: str | None = None
    start_selfie: str | None = None
    site_arrival_selfie: str | None = None
    return_start_selfie: str | None = None
    end_selfie: str | None = None
    start_coordinate: Coordinate | None = None
    arrival_coordinate: Coordinate | None = None
    return_start_coordinate: Coordinate | None = None
    end_coordinate: Coordinate | None = None
    distance_covered_km: float | None = None
    weather: str | None = None
    claim_status: ClaimStatus | None = None
    claim_amount: float | None = None
    expenses: tuple[ExpenseItem, ...] = ()
    overrides: tuple[CheckpointOverride, ...] = ()


TRAVEL_RATES: dict[TransportMode, float] = {
    TransportMode.BIKE: 8.0,
    TransportMode.CAR: 15.0,
}


@dataclass(frozen=True)
class ClaimBreakdown:
    """Travel allowance plus receipts for a completed tour."""

    distance_km: float
    rate: float
    travel_amount: float
    receipts_total: float

    @property
    def total(self) -> float:
        return self.travel_amount + self.receipts_total
