"""Tests for the tour lifecycle."""

from dataclasses import replace
from datetime import timedelta

import pytest

from fieldforce.adapters.document_repositories import DocumentTourRepository
from fieldforce.domain.errors import EntityNotFoundError, TourStateError
from fieldforce.domain.geo import UNSET_COORDINATE, Coordinate
from fieldforce.domain.sites import Site
from fieldforce.domain.tours import (
    ClaimStatus,
    PoolRole,
    TourPhase,
    TourPlan,
    TourStatus,
    TransportMode,
    TravelType,
)
from fieldforce.services.storage import InMemoryKeyValueStore
from fieldforce.services.tours import (
    TourService,
    TourTab,
    claim_breakdown,
    new_expense,
)
from tests.fakes import NOW, make_result

HOME = Coordinate(10.0, 10.0)
SITE = Coordinate(10.1, 10.0)
BIKE = TourPlan(transport_mode=TransportMode.BIKE)


def _service() -> TourService:
    return TourService(DocumentTourRepository(InMemoryKeyValueStore(), clock=lambda: NOW))


def test_list_tours_by_tab() -> None:
    service = _service()

    upcoming = {tour.id for tour in service.list_tours(TourTab.UPCOMING)}
    completed = {tour.id for tour in service.list_tours(TourTab.COMPLETED)}
    claimed = {tour.id for tour in service.list_tours(TourTab.CLAIMED)}

    assert upcoming == {"TR-001", "TR-002"}
    assert completed == {"TR-003"}
    assert claimed == {"TR-004", "TR-005"}
    assert len(service.list_tours()) == 5


def test_unknown_tour_raises() -> None:
    with pytest.raises(EntityNotFoundError):
        _service().get_tour("TR-999")


def test_only_upcoming_tours_start() -> None:
    with pytest.raises(TourStateError):
        _service().prepare_start("TR-003", BIKE)


def test_car_in_fine_weather_needs_surroundings_video() -> None:
    service = _service()
    car = TourPlan(transport_mode=TransportMode.CAR)

    with pytest.raises(ValueError):
        service.prepare_start("TR-001", car)

    service.prepare_start("TR-001", replace(car, bad_weather=True))
    service.prepare_start("TR-001", replace(car, surrounding_video_url="https://v/1"))


def test_pool_travel_needs_role() -> None:
    plan = TourPlan(transport_mode=TransportMode.BIKE, travel_type=TravelType.POOL)

    with pytest.raises(ValueError):
        _service().prepare_start("TR-002", plan)


def test_start_requires_vehicle_plate_photo() -> None:
    with pytest.raises(ValueError):
        _service().start_tour("TR-001", BIKE, make_result(HOME))


def test_start_tour_records_photos() -> None:
    service = _service()

    tour = service.start_tour("TR-001", BIKE, make_result(HOME, secondary=True))

    assert tour.status == TourStatus.IN_PROGRESS
    assert tour.phase == TourPhase.OUTWARD
    assert tour.start_selfie is not None
    assert tour.start_selfie.startswith("data:image/jpeg;base64,")
    assert tour.vehicle_plate_photo is not None
    assert tour.start_coordinate == HOME
    assert tour.weather == "Fine"
    assert service.get_tour("TR-001") == tour


def test_full_trip_computes_distance() -> None:
    service = _service()
    service.start_tour("TR-001", BIKE, make_result(HOME, secondary=True))

    arrived = service.record_checkpoint("TR-001", make_result(SITE))
    returning = service.record_checkpoint(
        "TR-001", make_result(SITE, captured_at=NOW + timedelta(hours=3))
    )
    finished = service.record_checkpoint(
        "TR-001", make_result(HOME, captured_at=NOW + timedelta(hours=4))
    )

    assert arrived.phase == TourPhase.ON_SITE
    assert arrived.site_arrival_selfie is not None
    assert returning.phase == TourPhase.RETURN
    assert finished.status == TourStatus.COMPLETED
    assert finished.end_coordinate == HOME
    assert finished.distance_covered_km == 22.2
    with pytest.raises(TourStateError):
        service.record_checkpoint("TR-001", make_result(HOME))


def test_overridden_arrival_is_kept_on_tour() -> None:
    service = _service()
    service.start_tour("TR-001", BIKE, make_result(HOME, secondary=True))

    tour = service.record_checkpoint(
        "TR-001",
        make_result(SITE, distance_meters=250.0, within_radius=False, overridden=True),
    )

    assert len(tour.overrides) == 1
    assert tour.overrides[0].phase == TourPhase.OUTWARD
    assert tour.overrides[0].distance_meters == 250.0


def test_new_site_replaces_unpinned_destination() -> None:
    service = _service()
    repository = service.repository
    repository.save_tour(
        replace(service.get_tour("TR-002"), to_coordinate=UNSET_COORDINATE)
    )
    plan = TourPlan(
        transport_mode=TransportMode.BIKE,
        travel_type=TravelType.POOL,
        pool_role=PoolRole.DRIVER,
    )
    service.start_tour("TR-002", plan, make_result(HOME, secondary=True))
    site = Site(id="S-1", name="Relay Tower", category="Field", coordinate=SITE)

    tour = service.record_checkpoint("TR-002", make_result(SITE), new_site=site)

    assert tour.to_location == "Relay Tower"
    assert tour.to_coordinate == SITE
    assert tour.pool_role == PoolRole.DRIVER


def test_new_site_rejected_for_pinned_destination() -> None:
    service = _service()
    service.start_tour("TR-001", BIKE, make_result(HOME, secondary=True))

    with pytest.raises(TourStateError):
        service.prepare_checkpoint("TR-001", defines_site=True)


def test_claim_completed_tour() -> None:
    service = _service()
    expenses = [new_expense("Food", 100.0, "Lunch")]

    quote = service.quote_claim("TR-003", expenses)
    tour = service.claim_expenses("TR-003", expenses)

    assert quote.travel_amount == 24 * 8.0
    assert quote.total == 292.0
    assert tour.status == TourStatus.CLAIMED
    assert tour.claim_status == ClaimStatus.DUE
    assert tour.claim_amount == 292.0
    assert tour.expenses == tuple(expenses)
    with pytest.raises(TourStateError):
        service.claim_expenses("TR-003", expenses)


def test_claim_rejects_non_positive_expense() -> None:
    with pytest.raises(ValueError):
        _service().claim_expenses("TR-003", [new_expense("Food", 0.0)])


def test_passengers_and_buses_earn_no_travel_allowance() -> None:
    tour = _service().get_tour("TR-003")

    passenger = claim_breakdown(replace(tour, pool_role=PoolRole.PASSENGER), [])
    bus = claim_breakdown(replace(tour, transport_mode=TransportMode.BUS), [])
    car = claim_breakdown(replace(tour, transport_mode=TransportMode.CAR), [])

    assert passenger.travel_amount == 0
    assert bus.travel_amount == 0
    assert car.travel_amount == 24 * 15.0


def test_request_advance() -> None:
    service = _service()

    tour = service.request_advance("TR-002", 300.0, "  Fuel ")

    assert tour.advance_amount == 300.0
    assert tour.advance_reason == "Fuel"
    with pytest.raises(TourStateError):
        service.request_advance("TR-004", 100.0, "Late")
    with pytest.raises(ValueError):
        service.request_advance("TR-002", 100.0, " ")
