"""Tour lifecycle services.

A tour moves Upcoming -> In Progress (OUTWARD -> ON_SITE -> RETURN) ->
Completed -> Claimed.  Each phase change is backed by a verified checkpoint
whose photo and coordinate are stored on the tour.
"""

import logging
import uuid
from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Protocol

from fieldforce.domain.checkpoints import CheckpointResult
from fieldforce.domain.errors import EntityNotFoundError, TourStateError
from fieldforce.domain.geo import Coordinate, distance_meters, is_unset
from fieldforce.domain.sites import Site
from fieldforce.domain.tours import (
    TRAVEL_RATES,
    CheckpointOverride,
    ClaimBreakdown,
    ClaimStatus,
    ExpenseItem,
    PoolRole,
    Tour,
    TourPhase,
    TourPlan,
    TourStatus,
    TransportMode,
    TravelType,
)

logger = logging.getLogger(__name__)


class TourRepository(Protocol):
    """Persistence interface for tours."""

    def list_tours(self) -> list[Tour]:
        """Return all tours."""

    def get_tour(self, tour_id: str) -> Tour | None:
        """Return a tour by id, if present."""

    def save_tour(self, tour: Tour) -> None:
        """Replace the stored tour with the same id."""


class TourTab(StrEnum):
    """Groupings shown on the tours list."""

    UPCOMING = "UPCOMING"
    COMPLETED = "COMPLETED"
    CLAIMED = "CLAIMED"


_TAB_STATUSES = {
    TourTab.UPCOMING: {TourStatus.UPCOMING, TourStatus.IN_PROGRESS},
    TourTab.COMPLETED: {TourStatus.COMPLETED},
    TourTab.CLAIMED: {TourStatus.CLAIMED},
}


@dataclass
class TourService:
    """Application service for starting, tracking and claiming tours."""

    repository: TourRepository

    def list_tours(self, tab: TourTab | None = None) -> list[Tour]:
        """Return tours for a tab, earliest scheduled first."""
        tours = self.repository.list_tours()
        if tab is not None:
            statuses = _TAB_STATUSES[tab]
            tours = [tour for tour in tours if tour.status in statuses]
        return sorted(tours, key=lambda tour: tour.start_date)

    def get_tour(self, tour_id: str) -> Tour:
        """Return a tour or raise EntityNotFoundError."""
        tour = self.repository.get_tour(tour_id)
        if tour is None:
            raise EntityNotFoundError("Tour", tour_id)
        return tour

    def prepare_start(self, tour_id: str, plan: TourPlan) -> Tour:
        """Check that a tour can be started with ``plan`` before any capture."""
        tour = self.get_tour(tour_id)
        if tour.status != TourStatus.UPCOMING:
            raise TourStateError(f"Tour {tour_id} is {tour.status}, not Upcoming")
        if plan.requires_surrounding_video and not plan.surrounding_video_url:
            raise ValueError("A 360 degree surroundings video is required")
        if plan.travel_type == TravelType.POOL and plan.pool_role is None:
            raise ValueError("Pool role is required for pooled travel")
        return tour

    def start_tour(
        self, tour_id: str, plan: TourPlan, result: CheckpointResult
    ) -> Tour:
        """Begin the outward leg with the start selfie and vehicle plate."""
        tour = self.prepare_start(tour_id, plan)
        if result.secondary_photo is None:
            raise ValueError("A vehicle plate photo is required")
        pool_role = plan.pool_role if plan.travel_type == TravelType.POOL else None

        updated = replace(
            tour,
            status=TourStatus.IN_PROGRESS,
            phase=TourPhase.OUTWARD,
            actual_start_date=result.captured_at,
            transport_mode=plan.transport_mode,
            travel_type=plan.travel_type,
            pool_role=pool_role,
            project_id=plan.project_id or tour.project_id,
            task_name=plan.task_name or tour.task_name,
            task_description=plan.task_description or tour.task_description,
            to_location=plan.to_location or tour.to_location,
            start_selfie=result.photo.data_url(),
            vehicle_plate_photo=result.secondary_photo.data_url(),
            surrounding_video_url=plan.surrounding_video_url,
            start_coordinate=result.coordinate,
            weather="Bad" if plan.bad_weather else "Fine",
        )
        self.repository.save_tour(updated)
        logger.info("Tour started", extra={"tour_id": tour_id})
        return updated

    def prepare_checkpoint(self, tour_id: str, defines_site: bool = False) -> Tour:
        """Check that the tour has a next phase before any capture."""
        tour = self.get_tour(tour_id)
        if tour.status != TourStatus.IN_PROGRESS or tour.phase is None:
            raise TourStateError(f"Tour {tour_id} is not in progress")
        if defines_site and (
            tour.phase != TourPhase.OUTWARD or not is_unset(tour.to_coordinate)
        ):
            raise TourStateError("A new site can only be defined on arrival")
        return tour

    def record_checkpoint(
        self, tour_id: str, result: CheckpointResult, new_site: Site | None = None
    ) -> Tour:
        """Advance the tour one phase using a verified checkpoint."""
        tour = self.prepare_checkpoint(tour_id, defines_site=new_site is not None)

        overrides = tour.overrides
        if result.overridden:
            overrides = (
                *overrides,
                CheckpointOverride(
                    phase=tour.phase,
                    distance_meters=result.distance_meters,
                    recorded_at=result.captured_at,
                ),
            )
        selfie = result.photo.data_url()

        if tour.phase == TourPhase.OUTWARD:
            updated = replace(
                tour,
                phase=TourPhase.ON_SITE,
                site_arrival_time=result.captured_at,
                site_arrival_selfie=selfie,
                arrival_coordinate=result.coordinate,
                overrides=overrides,
            )
            if new_site is not None:
                updated = replace(
                    updated,
                    to_location=new_site.name,
                    to_coordinate=new_site.coordinate,
                )
        elif tour.phase == TourPhase.ON_SITE:
            updated = replace(
                tour,
                phase=TourPhase.RETURN,
                return_start_time=result.captured_at,
                return_start_selfie=selfie,
                return_start_coordinate=result.coordinate,
                overrides=overrides,
            )
        else:
            updated = replace(
                tour,
                status=TourStatus.COMPLETED,
                actual_end_date=result.captured_at,
                end_selfie=selfie,
                end_coordinate=result.coordinate,
                overrides=overrides,
            )
            updated = replace(updated, distance_covered_km=distance_covered_km(updated))

        self.repository.save_tour(updated)
        logger.info(
            "Tour checkpoint recorded",
            extra={
                "tour_id": tour_id,
                "phase": tour.phase,
                "overridden": result.overridden,
            },
        )
        return updated

    def quote_claim(self, tour_id: str, expenses: list[ExpenseItem]) -> ClaimBreakdown:
        """Compute the claim amount without submitting it."""
        return claim_breakdown(self.get_tour(tour_id), expenses)

    def claim_expenses(self, tour_id: str, expenses: list[ExpenseItem]) -> Tour:
        """Submit the travel allowance and receipts of a completed tour."""
        tour = self.get_tour(tour_id)
        if tour.status != TourStatus.COMPLETED:
            raise TourStateError(f"Tour {tour_id} is {tour.status}, not Completed")
        for item in expenses:
            if item.amount <= 0:
                raise ValueError("Expense amounts must be positive")
        breakdown = claim_breakdown(tour, expenses)
        updated = replace(
            tour,
            status=TourStatus.CLAIMED,
            claim_status=ClaimStatus.DUE,
            claim_amount=breakdown.total,
            expenses=tuple(expenses),
        )
        self.repository.save_tour(updated)
        logger.info(
            "Tour claimed", extra={"tour_id": tour_id, "amount": breakdown.total}
        )
        return updated

    def request_advance(self, tour_id: str, amount: float, reason: str) -> Tour:
        """Record an advance request for a tour that has not finished."""
        tour = self.get_tour(tour_id)
        if tour.status not in {TourStatus.UPCOMING, TourStatus.IN_PROGRESS}:
            raise TourStateError(f"Tour {tour_id} is already {tour.status}")
        reason = reason.strip()
        if amount <= 0 or not reason:
            raise ValueError("An amount and a reason are required")
        updated = replace(tour, advance_amount=amount, advance_reason=reason)
        self.repository.save_tour(updated)
        return updated


def new_expense(
    category: str, amount: float, description: str = "", receipt: str | None = None
) -> ExpenseItem:
    """Build an expense line with a fresh id."""
    return ExpenseItem(
        id=uuid.uuid4().hex[:12],
        category=category,
        amount=amount,
        description=description,
        receipt=receipt,
    )


def claim_breakdown(tour: Tour, expenses: list[ExpenseItem]) -> ClaimBreakdown:
    """Travel allowance is distance times the mode's rate; passengers get none."""
    distance = tour.distance_covered_km or 0.0
    rate = TRAVEL_RATES.get(tour.transport_mode or TransportMode.BIKE, 0.0)
    travel_amount = 0.0 if tour.pool_role == PoolRole.PASSENGER else distance * rate
    return ClaimBreakdown(
        distance_km=distance,
        rate=rate,
        travel_amount=travel_amount,
        receipts_total=sum(item.amount for item in expenses),
    )


def distance_covered_km(tour: Tour) -> float:
    """Sum the great-circle legs between the recorded checkpoints."""
    points: list[Coordinate] = [
        point
        for point in (
            tour.start_coordinate,
            tour.arrival_coordinate,
            tour.return_start_coordinate,
            tour.end_coordinate,
        )
        if point is not None and not is_unset(point)
    ]
    meters = sum(
        distance_meters(first, second)
        for first, second in zip(points, points[1:], strict=False)
    )
    return round(meters / 1000, 1)
