"""Tests for the checkpoint coordinator."""

import asyncio

import pytest

from fieldforce.adapters.document_repositories import DocumentAuditRepository
from fieldforce.domain.checkpoints import (
    CheckpointConfig,
    CheckpointResult,
    CheckpointState,
    ErrorReason,
)
from fieldforce.domain.errors import CameraError
from fieldforce.services.audit import AuditService
from fieldforce.services.checkpoints import CheckpointWorkflow, WorkflowTiming
from fieldforce.services.coordinator import (
    CheckpointBusyError,
    CheckpointCoordinator,
    OutcomeStatus,
)
from fieldforce.services.storage import InMemoryKeyValueStore
from tests.fakes import (
    OFFICE,
    TWO_FIFTY_METERS_NORTH,
    FakeCamera,
    FakeGeolocation,
    FakeLivenessVerifier,
)


def _coordinator(
    camera: FakeCamera | None = None, geolocation: FakeGeolocation | None = None
) -> CheckpointCoordinator:
    workflow = CheckpointWorkflow(
        camera=camera or FakeCamera(),
        geolocation=geolocation or FakeGeolocation(),
        liveness_verifier=FakeLivenessVerifier(),
        timing=WorkflowTiming(liveness_challenge_seconds=0, frame_poll_seconds=0),
    )
    audit = AuditService(DocumentAuditRepository(InMemoryKeyValueStore()))
    return CheckpointCoordinator(workflow=workflow, audit=audit)


def test_success_is_applied() -> None:
    applied: list[CheckpointResult] = []

    def on_success(result: CheckpointResult) -> str:
        applied.append(result)
        return "punched"

    async def scenario():
        coordinator = _coordinator()
        coordinator.begin(
            "attendance", CheckpointConfig(requires_liveness=True), on_success
        )
        assert coordinator.is_busy
        outcome = await coordinator.wait()
        return coordinator, outcome

    coordinator, outcome = asyncio.run(scenario())

    assert outcome is not None
    assert outcome.status == OutcomeStatus.SUCCEEDED
    assert outcome.purpose == "attendance"
    assert outcome.value == "punched"
    assert len(applied) == 1
    assert not coordinator.is_busy


def test_second_run_is_rejected_while_busy() -> None:
    async def scenario():
        coordinator = _coordinator()
        coordinator.begin("tour_start", CheckpointConfig(), lambda result: None)
        await coordinator.wait_for(CheckpointState.PRIMARY_CAPTURING)
        with pytest.raises(CheckpointBusyError):
            coordinator.begin("attendance", CheckpointConfig(), lambda result: None)
        coordinator.cancel()
        return await coordinator.wait()

    outcome = asyncio.run(scenario())

    assert outcome is not None
    assert outcome.status == OutcomeStatus.CANCELLED
    assert outcome.purpose == "tour_start"


def test_workflow_failure_is_reported() -> None:
    camera = FakeCamera(error=CameraError(ErrorReason.DEVICE_BUSY))

    async def scenario():
        coordinator = _coordinator(camera)
        coordinator.begin("attendance", CheckpointConfig(), lambda result: None)
        return await coordinator.wait()

    outcome = asyncio.run(scenario())

    assert outcome is not None
    assert outcome.status == OutcomeStatus.FAILED
    assert outcome.error_reason == ErrorReason.DEVICE_BUSY
    assert outcome.message


def test_handler_failure_is_reported() -> None:
    def on_success(result: CheckpointResult) -> None:
        raise ValueError("Tour TR-001 is Completed")

    async def scenario():
        coordinator = _coordinator()
        coordinator.begin(
            "tour_checkpoint",
            CheckpointConfig(requires_liveness=True),
            on_success,
            entity_id="TR-001",
        )
        return await coordinator.wait()

    outcome = asyncio.run(scenario())

    assert outcome is not None
    assert outcome.status == OutcomeStatus.FAILED
    assert outcome.error_reason == ErrorReason.UNKNOWN
    assert outcome.message == "Tour TR-001 is Completed"


def test_override_is_audited() -> None:
    geolocation = FakeGeolocation(TWO_FIFTY_METERS_NORTH)

    async def scenario():
        coordinator = _coordinator(geolocation=geolocation)
        coordinator.begin(
            "training_start",
            CheckpointConfig(
                requires_liveness=True,
                requires_location_check=True,
                target_coordinate=OFFICE,
            ),
            lambda result: result.overridden,
            entity_id="T-101",
        )
        await coordinator.wait_for(CheckpointState.LOCATION_MISMATCH_WARNING)
        coordinator.force_proceed()
        return coordinator, await coordinator.wait()

    coordinator, outcome = asyncio.run(scenario())

    assert outcome is not None
    assert outcome.status == OutcomeStatus.SUCCEEDED
    assert outcome.overridden is True
    overrides = coordinator.audit.list_overrides()
    assert [event["entity_id"] for event in overrides] == ["T-101"]


def test_shutdown_cancels_active_run() -> None:
    camera = FakeCamera()

    async def scenario():
        coordinator = _coordinator(camera)
        coordinator.begin("attendance", CheckpointConfig(), lambda result: None)
        await coordinator.wait_for(CheckpointState.PRIMARY_CAPTURING)
        await coordinator.shutdown()
        return coordinator

    coordinator = asyncio.run(scenario())

    assert coordinator.outcome is not None
    assert coordinator.outcome.status == OutcomeStatus.CANCELLED
    assert camera.open_streams == 0
