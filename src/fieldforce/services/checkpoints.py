"""Checkpoint verification workflow.

A run acquires a camera, optionally challenges the user with a liveness
prompt, captures one or two photos, optionally checks the device position
against a target site and finally yields a ``CheckpointResult``.  Every stage
that waits on a device, a timer or the user is an ``await``; cancelling a run
releases the camera synchronously and prevents any later transition.
"""

import asyncio
import itertools
import logging
import random
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from fieldforce.domain.checkpoints import (
    CAPTURE_STATES,
    LIVENESS_ACTIONS,
    TERMINAL_STATES,
    CameraFacing,
    CapturedPhoto,
    CheckpointConfig,
    CheckpointResult,
    CheckpointState,
    ErrorReason,
    LivenessOutcome,
    WorkflowSnapshot,
)
from fieldforce.domain.errors import (
    CameraError,
    CheckpointCancelledError,
    CheckpointError,
    FrameNotReadyError,
    GeolocationError,
    WorkflowStateError,
)
from fieldforce.domain.geo import Coordinate, distance_meters, is_unset

logger = logging.getLogger(__name__)


class CameraStream(Protocol):
    """A live video feed from one camera."""

    @property
    def facing(self) -> CameraFacing:
        """Return which camera the stream belongs to."""

    @property
    def is_active(self) -> bool:
        """Return true until the stream has been released."""

    def capture_frame(self) -> bytes:
        """Return the current frame as JPEG bytes or raise FrameNotReadyError."""

    def release(self) -> None:
        """Stop all tracks of the stream. Safe to call more than once."""


class Camera(Protocol):
    """Device camera access."""

    async def acquire(self, facing: CameraFacing) -> CameraStream:
        """Open a stream for the requested camera or raise CameraError."""


class GeolocationProvider(Protocol):
    """One-shot device position lookup."""

    async def get_fix(self, timeout_seconds: float) -> Coordinate:
        """Return the current coordinate or raise GeolocationError."""


class LivenessVerifier(Protocol):
    """Decides whether the person in front of the camera is live."""

    async def verify(self, stream: CameraStream, action: str) -> LivenessOutcome:
        """Assess the stream while the user performs ``action``."""


TransitionListener = Callable[[WorkflowSnapshot], None]


@dataclass(frozen=True)
class WorkflowTiming:
    """Durations and bounds used by a checkpoint run."""

    camera_timeout_seconds: float = 15.0
    geolocation_timeout_seconds: float = 10.0
    liveness_challenge_seconds: float = 3.0
    frame_poll_seconds: float = 0.1


@dataclass
class _Run:
    run_id: int
    config: CheckpointConfig
    active: bool = True
    task: asyncio.Task[None] | None = None
    stream: CameraStream | None = None
    waiter: asyncio.Future | None = None
    liveness_action: str | None = None
    distance: float | None = None
    result: CheckpointResult | None = None
    error: CheckpointError | None = None


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class CheckpointWorkflow:
    """State machine driving one checkpoint run at a time."""

    camera: Camera
    geolocation: GeolocationProvider
    liveness_verifier: LivenessVerifier
    timing: WorkflowTiming = field(default_factory=WorkflowTiming)
    rng: random.Random = field(default_factory=random.Random)
    clock: Callable[[], datetime] = _utcnow
    _state: CheckpointState = field(init=False, default=CheckpointState.IDLE)
    _run: _Run | None = field(init=False, default=None)
    _changed: asyncio.Event = field(init=False, default_factory=asyncio.Event)
    _listeners: list[TransitionListener] = field(init=False, default_factory=list)
    _run_ids: itertools.count = field(
        init=False, default_factory=lambda: itertools.count(1)
    )

    @property
    def state(self) -> CheckpointState:
        """Return the current state."""
        return self._state

    def add_listener(self, listener: TransitionListener) -> None:
        """Register a callback invoked with a snapshot after every transition."""
        self._listeners.append(listener)

    def snapshot(self) -> WorkflowSnapshot:
        """Return a read-only view of the current run."""
        run = self._run
        if run is None:
            return WorkflowSnapshot(run_id=0, state=self._state)
        return WorkflowSnapshot(
            run_id=run.run_id,
            state=self._state,
            liveness_action=run.liveness_action,
            distance_meters=run.distance,
            error_reason=run.error.reason if run.error else None,
            error_message=run.error.message if run.error else None,
        )

    def start(self, config: CheckpointConfig) -> WorkflowSnapshot:
        """Begin a new run. Must be called from a running event loop."""
        if self._run is not None and self._state not in TERMINAL_STATES:
            raise WorkflowStateError(
                f"A checkpoint run is already in progress ({self._state})"
            )
        loop = asyncio.get_running_loop()
        run = _Run(run_id=next(self._run_ids), config=config)
        self._run = run
        self._transition(run, CheckpointState.ACQUIRING_CAMERA)
        run.task = loop.create_task(self._drive(run))
        return self.snapshot()

    def capture(self) -> bool:
        """Grab the frame the user asked for.

        Returns False only when the video is not ready yet; the run keeps
        waiting. Any other camera failure ends the run in ERROR.
        """
        run = self._active_run()
        if self._state not in CAPTURE_STATES or run.waiter is None:
            raise WorkflowStateError(f"Nothing to capture in state {self._state}")
        if run.waiter.done():
            return True
        stream = self._current_stream(run)
        try:
            data = stream.capture_frame()
        except FrameNotReadyError:
            logger.info("Frame not ready yet", extra={"run_id": run.run_id})
            return False
        except Exception as exc:  # noqa: BLE001
            run.waiter.set_exception(exc)
            return True
        run.waiter.set_result(self._photo(data, stream.facing))
        return True

    def force_proceed(self) -> None:
        """Accept a location mismatch and finish the run anyway."""
        run = self._active_run()
        if (
            self._state != CheckpointState.LOCATION_MISMATCH_WARNING
            or run.waiter is None
        ):
            raise WorkflowStateError(f"Nothing to confirm in state {self._state}")
        if not run.waiter.done():
            run.waiter.set_result(True)

    def cancel(self) -> None:
        """Abort the current run, releasing the camera immediately."""
        run = self._run
        if run is None or not run.active or self._state in TERMINAL_STATES:
            return
        run.active = False
        self._release_stream(run)
        if run.waiter is not None and not run.waiter.done():
            run.waiter.cancel()
        if run.task is not None and not run.task.done():
            run.task.cancel()
        self._enter(run, CheckpointState.CANCELLED)

    async def wait_for(self, *states: CheckpointState) -> WorkflowSnapshot:
        """Wait until the run reaches one of ``states`` or finishes."""
        if self._run is None:
            raise WorkflowStateError("No checkpoint run has been started")
        while self._state not in states and self._state not in TERMINAL_STATES:
            await self._changed.wait()
        return self.snapshot()

    async def result(self) -> CheckpointResult:
        """Wait for the run to finish and return its result."""
        run = self._run
        if run is None:
            raise WorkflowStateError("No checkpoint run has been started")
        snapshot = await self.wait_for()
        if snapshot.state == CheckpointState.SUCCESS and run.result is not None:
            return run.result
        if snapshot.state == CheckpointState.ERROR and run.error is not None:
            raise run.error
        raise CheckpointCancelledError(f"Checkpoint run {run.run_id} was cancelled")

    async def _drive(self, run: _Run) -> None:
        try:
            result = await self._execute(run)
        except asyncio.CancelledError:
            self._release_stream(run)
            raise
        except CheckpointError as exc:
            self._release_stream(run)
            self._fail(run, exc)
            return
        except Exception:
            logger.exception(
                "Checkpoint run failed unexpectedly", extra={"run_id": run.run_id}
            )
            self._release_stream(run)
            self._fail(run, CheckpointError(ErrorReason.UNKNOWN))
            return
        self._release_stream(run)
        if not self._is_current(run):
            return
        run.result = result
        self._transition(run, CheckpointState.SUCCESS)

    async def _execute(self, run: _Run) -> CheckpointResult:
        config = run.config
        await self._open_stream(run, config.camera_facing)

        if config.requires_liveness:
            primary = await self._run_liveness(run)
        else:
            primary = await self._await_capture(run, CheckpointState.PRIMARY_CAPTURING)
        self._transition(run, CheckpointState.PRIMARY_CAPTURED)

        secondary: CapturedPhoto | None = None
        if config.secondary_capture:
            self._transition(run, CheckpointState.SWITCHING_CAMERA)
            self._release_stream(run)
            await self._open_stream(run, CameraFacing.ENVIRONMENT)
            secondary = await self._await_capture(
                run, CheckpointState.SECONDARY_CAPTURING
            )
            self._transition(run, CheckpointState.SECONDARY_CAPTURED)
        self._release_stream(run)

        coordinate: Coordinate | None = None
        within_radius = True
        overridden = False
        if config.requires_location_check:
            self._transition(run, CheckpointState.LOCATION_CHECKING)
            coordinate = await self._get_fix()
            target = config.target_coordinate
            # Unknown or unpinned sites skip the radius check.
            if target is not None and not is_unset(target):
                run.distance = distance_meters(coordinate, target)
                within_radius = run.distance <= config.allowed_radius_meters
                if not within_radius:
                    await self._await_decision(run)
                    overridden = True

        return CheckpointResult(
            photo=primary,
            secondary_photo=secondary,
            coordinate=coordinate,
            distance_meters=run.distance,
            within_radius=within_radius,
            captured_at=self.clock(),
            overridden=overridden,
            liveness_action=run.liveness_action,
        )

    async def _run_liveness(self, run: _Run) -> CapturedPhoto:
        run.liveness_action = self.rng.choice(LIVENESS_ACTIONS)
        self._transition(run, CheckpointState.LIVENESS_CHALLENGE)
        await asyncio.sleep(self.timing.liveness_challenge_seconds)

        self._transition(run, CheckpointState.LIVENESS_VERIFYING)
        outcome = await self.liveness_verifier.verify(
            self._current_stream(run), run.liveness_action
        )
        if outcome == LivenessOutcome.FAIL:
            raise CheckpointError(ErrorReason.LIVENESS_FAILED)
        if outcome == LivenessOutcome.INCONCLUSIVE:
            raise CheckpointError(ErrorReason.LIVENESS_INCONCLUSIVE)
        return await self._grab_when_ready(run)

    async def _open_stream(self, run: _Run, facing: CameraFacing) -> None:
        try:
            stream = await asyncio.wait_for(
                self.camera.acquire(facing),
                timeout=self.timing.camera_timeout_seconds,
            )
        except TimeoutError:
            raise CameraError(ErrorReason.CAMERA_TIMEOUT) from None
        if not self._is_current(run):
            stream.release()
            raise asyncio.CancelledError
        run.stream = stream

    async def _grab_when_ready(self, run: _Run) -> CapturedPhoto:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timing.camera_timeout_seconds
        while True:
            stream = self._current_stream(run)
            try:
                return self._photo(stream.capture_frame(), stream.facing)
            except FrameNotReadyError:
                if loop.time() >= deadline:
                    raise CameraError(ErrorReason.CAMERA_TIMEOUT) from None
                await asyncio.sleep(self.timing.frame_poll_seconds)

    async def _await_capture(
        self, run: _Run, state: CheckpointState
    ) -> CapturedPhoto:
        run.waiter = asyncio.get_running_loop().create_future()
        self._transition(run, state)
        try:
            return await run.waiter
        finally:
            run.waiter = None

    async def _await_decision(self, run: _Run) -> None:
        run.waiter = asyncio.get_running_loop().create_future()
        self._transition(run, CheckpointState.LOCATION_MISMATCH_WARNING)
        try:
            await run.waiter
        finally:
            run.waiter = None

    async def _get_fix(self) -> Coordinate:
        timeout = self.timing.geolocation_timeout_seconds
        try:
            return await asyncio.wait_for(
                self.geolocation.get_fix(timeout), timeout=timeout
            )
        except TimeoutError:
            raise GeolocationError(ErrorReason.LOCATION_TIMEOUT) from None

    def _photo(self, data: bytes, facing: CameraFacing) -> CapturedPhoto:
        return CapturedPhoto(data=data, facing=facing, captured_at=self.clock())

    def _active_run(self) -> _Run:
        run = self._run
        if run is None or not run.active:
            raise WorkflowStateError("No active checkpoint run")
        return run

    def _is_current(self, run: _Run) -> bool:
        return run.active and run is self._run

    def _current_stream(self, run: _Run) -> CameraStream:
        if run.stream is None:
            raise WorkflowStateError("No camera stream is open")
        return run.stream

    def _release_stream(self, run: _Run) -> None:
        stream, run.stream = run.stream, None
        if stream is not None:
            stream.release()

    def _fail(self, run: _Run, error: CheckpointError) -> None:
        if not self._is_current(run):
            return
        run.error = error
        logger.warning(
            "Checkpoint run failed: %s",
            error.reason,
            extra={"run_id": run.run_id},
        )
        self._transition(run, CheckpointState.ERROR)

    def _transition(self, run: _Run, state: CheckpointState) -> None:
        if not self._is_current(run):
            return
        self._enter(run, state)

    def _enter(self, run: _Run, state: CheckpointState) -> None:
        previous, self._state = self._state, state
        logger.info(
            "Checkpoint run %s: %s -> %s", run.run_id, previous, state
        )
        changed, self._changed = self._changed, asyncio.Event()
        changed.set()
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Checkpoint listener failed")
