"""Tests for training sessions."""

from datetime import timedelta

import pytest

from fieldforce.adapters.document_repositories import DocumentTrainingRepository
from fieldforce.domain.errors import EntityNotFoundError, SessionStateError
from fieldforce.domain.training import TrainingRole, TrainingStatus
from fieldforce.services.storage import InMemoryKeyValueStore
from fieldforce.services.training import TrainingService
from tests.fakes import NOW, make_result


def _service() -> TrainingService:
    return TrainingService(
        DocumentTrainingRepository(InMemoryKeyValueStore(), clock=lambda: NOW)
    )


def test_list_sessions_by_role() -> None:
    service = _service()

    trainer = service.list_sessions(TrainingRole.TRAINER)
    trainee = service.list_sessions(TrainingRole.TRAINEE)

    assert {session.id for session in trainer} == {"G-201", "G-202", "G-203"}
    assert {session.id for session in trainee} == {"T-101", "T-102", "T-103"}
    assert [session.start_date for session in trainee] == sorted(
        session.start_date for session in trainee
    )


def test_start_and_complete_session() -> None:
    service = _service()

    started = service.start_session(
        "T-101",
        make_result(distance_meters=250.0, within_radius=False, overridden=True),
    )
    completed = service.complete_session(
        "T-101", make_result(captured_at=NOW + timedelta(hours=2)), "  All good "
    )

    assert started.status == TrainingStatus.IN_PROGRESS
    assert started.start_overridden is True
    assert started.start_distance_meters == 250.0
    assert started.start_photo is not None
    assert completed.status == TrainingStatus.COMPLETED
    assert completed.remarks == "All good"
    assert completed.completion_photo is not None
    assert service.duration("T-101") == timedelta(hours=2)


def test_blank_remarks_are_dropped() -> None:
    service = _service()
    service.start_session("T-101", make_result())

    completed = service.complete_session("T-101", make_result(), "   ")

    assert completed.remarks is None


def test_status_guards() -> None:
    service = _service()

    with pytest.raises(SessionStateError):
        service.prepare_start("T-103")
    with pytest.raises(SessionStateError):
        service.prepare_completion("T-101")
    with pytest.raises(EntityNotFoundError):
        service.get_session("T-999")
    assert service.duration("T-102") is None
