"""Owns the device camera across pages and applies finished runs."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from enum import StrEnum

from fieldforce.domain.checkpoints import (
    CheckpointConfig,
    CheckpointResult,
    CheckpointState,
    ErrorReason,
    WorkflowSnapshot,
)
from fieldforce.domain.errors import CheckpointCancelledError, CheckpointError
from fieldforce.services.audit import AuditService
from fieldforce.services.checkpoints import CheckpointWorkflow

logger = logging.getLogger(__name__)

SuccessHandler = Callable[[CheckpointResult], object]


class CheckpointBusyError(RuntimeError):
    """Another checkpoint run already holds the camera."""


class OutcomeStatus(StrEnum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class CheckpointOutcome:
    """What became of the latest run, for polling clients."""

    run_id: int
    purpose: str
    entity_id: str | None
    status: OutcomeStatus = OutcomeStatus.PENDING
    error_reason: ErrorReason | None = None
    message: str | None = None
    overridden: bool = False
    value: object | None = None


@dataclass
class CheckpointCoordinator:
    """Runs at most one checkpoint at a time and hands results to their page."""

    workflow: CheckpointWorkflow
    audit: AuditService
    _task: asyncio.Task[None] | None = field(init=False, default=None)
    _outcome: CheckpointOutcome | None = field(init=False, default=None)

    @property
    def is_busy(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def outcome(self) -> CheckpointOutcome | None:
        return self._outcome

    def begin(
        self,
        purpose: str,
        config: CheckpointConfig,
        on_success: SuccessHandler,
        entity_id: str | None = None,
    ) -> WorkflowSnapshot:
        """Start a run; ``on_success`` receives the result once it succeeds."""
        if self.is_busy:
            raise CheckpointBusyError("A checkpoint is already in progress")
        snapshot = self.workflow.start(config)
        self._outcome = CheckpointOutcome(
            run_id=snapshot.run_id, purpose=purpose, entity_id=entity_id
        )
        logger.info(
            "Checkpoint started",
            extra={
                "purpose": purpose,
                "entity_id": entity_id,
                "run_id": snapshot.run_id,
            },
        )
        self._task = asyncio.get_running_loop().create_task(
            self._settle(self._outcome, on_success)
        )
        return snapshot

    def snapshot(self) -> WorkflowSnapshot:
        return self.workflow.snapshot()

    def capture(self) -> bool:
        return self.workflow.capture()

    def force_proceed(self) -> None:
        self.workflow.force_proceed()

    def cancel(self) -> None:
        self.workflow.cancel()

    async def wait(self) -> CheckpointOutcome | None:
        """Wait until the current run has been applied."""
        if self._task is not None:
            await asyncio.shield(self._task)
        return self._outcome

    async def wait_for(self, *states: CheckpointState) -> WorkflowSnapshot:
        """Wait until the run reaches one of ``states`` or finishes."""
        return await self.workflow.wait_for(*states)

    async def shutdown(self) -> None:
        """Cancel any active run, as when the hosting page goes away."""
        self.workflow.cancel()
        await self.wait()

    async def _settle(
        self, pending: CheckpointOutcome, on_success: SuccessHandler
    ) -> None:
        try:
            result = await self.workflow.result()
        except CheckpointCancelledError:
            self._finish(pending, status=OutcomeStatus.CANCELLED)
            return
        except CheckpointError as exc:
            self._finish(
                pending,
                status=OutcomeStatus.FAILED,
                error_reason=exc.reason,
                message=exc.message,
            )
            return

        try:
            value = on_success(result)
            if result.overridden:
                self.audit.record_override(
                    pending.purpose, pending.entity_id or "", result
                )
        except Exception as exc:  # noqa: BLE001
            logger.exception(
                "Failed to apply checkpoint result",
                extra={"purpose": pending.purpose, "entity_id": pending.entity_id},
            )
            self._finish(
                pending,
                status=OutcomeStatus.FAILED,
                error_reason=ErrorReason.UNKNOWN,
                message=str(exc) or exc.__class__.__name__,
            )
            return
        self._finish(
            pending,
            status=OutcomeStatus.SUCCEEDED,
            overridden=result.overridden,
            value=value,
        )

    def _finish(self, pending: CheckpointOutcome, **changes: object) -> None:
        if self._outcome is None or self._outcome.run_id != pending.run_id:
            return
        self._outcome = replace(pending, **changes)
        logger.info(
            "Checkpoint %s", self._outcome.status, extra={"purpose": pending.purpose}
        )
