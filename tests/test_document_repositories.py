"""Tests for key-value backed repositories."""

from dataclasses import replace

from fieldforce.adapters.document_repositories import (
    ATTENDANCE_STATE_KEY,
    TOURS_KEY,
    DocumentAttendanceRepository,
    DocumentTourRepository,
    DocumentTrainingRepository,
)
from fieldforce.domain.attendance import AttendanceState, PunchStatus
from fieldforce.domain.tours import TourStatus
from fieldforce.services.storage import InMemoryKeyValueStore
from tests.fakes import NOW, OFFICE


def test_seeds_are_served_until_first_write() -> None:
    store = InMemoryKeyValueStore()
    repository = DocumentTourRepository(store, clock=lambda: NOW)

    tours = repository.list_tours()

    assert [tour.id for tour in tours] == [
        "TR-001",
        "TR-002",
        "TR-003",
        "TR-004",
        "TR-005",
    ]
    assert store.get(TOURS_KEY) == []


def test_save_replaces_in_place_and_prepends_new() -> None:
    store = InMemoryKeyValueStore()
    repository = DocumentTourRepository(store, clock=lambda: NOW)
    first = repository.get_tour("TR-001")
    assert first is not None

    repository.save_tour(replace(first, status=TourStatus.IN_PROGRESS))
    repository.save_tour(replace(first, id="TR-900"))
    tours = repository.list_tours()

    assert [tour.id for tour in tours][:2] == ["TR-900", "TR-001"]
    assert len(tours) == 6
    assert tours[1].status == TourStatus.IN_PROGRESS
    assert tours[1].to_coordinate == OFFICE
    assert store.get(TOURS_KEY)[1]["status"] == "In Progress"


def test_training_lookup() -> None:
    repository = DocumentTrainingRepository(InMemoryKeyValueStore(), clock=lambda: NOW)

    assert repository.get_session("T-101") is not None
    assert repository.get_session("T-404") is None


def test_attendance_state_round_trip() -> None:
    store = InMemoryKeyValueStore()
    repository = DocumentAttendanceRepository(store)
    assert repository.get_state() == AttendanceState()

    state = AttendanceState(status=PunchStatus.IN, punch_in_time="09:00", coordinate=OFFICE)
    repository.save_state(state)

    assert repository.get_state() == state
    assert store.get(ATTENDANCE_STATE_KEY)[0]["status"] == "IN"
