"""Domain models for checkpoint verification runs."""

import base64
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from fieldforce.domain.geo import Coordinate


class CameraFacing(StrEnum):
    """Which physical camera a stream is requested from."""

    USER = "user"
    ENVIRONMENT = "environment"


class CheckpointState(StrEnum):
    """States of a single checkpoint run."""

    IDLE = "IDLE"
    ACQUIRING_CAMERA = "ACQUIRING_CAMERA"
    LIVENESS_CHALLENGE = "LIVENESS_CHALLENGE"
    LIVENESS_VERIFYING = "LIVENESS_VERIFYING"
    PRIMARY_CAPTURING = "PRIMARY_CAPTURING"
    PRIMARY_CAPTURED = "PRIMARY_CAPTURED"
    SWITCHING_CAMERA = "SWITCHING_CAMERA"
    SECONDARY_CAPTURING = "SECONDARY_CAPTURING"
    SECONDARY_CAPTURED = "SECONDARY_CAPTURED"
    LOCATION_CHECKING = "LOCATION_CHECKING"
    LOCATION_MISMATCH_WARNING = "LOCATION_MISMATCH_WARNING"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"
    CANCELLED = "CANCELLED"


TERMINAL_STATES = frozenset(
    {CheckpointState.SUCCESS, CheckpointState.ERROR, CheckpointState.CANCELLED}
)
CAPTURE_STATES = frozenset(
    {CheckpointState.PRIMARY_CAPTURING, CheckpointState.SECONDARY_CAPTURING}
)


class ErrorReason(StrEnum):
    """Typed failure reasons surfaced to the hosting page."""

    PERMISSION_DENIED = "PERMISSION_DENIED"
    DEVICE_BUSY = "DEVICE_BUSY"
    DEVICE_NOT_FOUND = "DEVICE_NOT_FOUND"
    CAMERA_TIMEOUT = "CAMERA_TIMEOUT"
    LOCATION_UNAVAILABLE = "LOCATION_UNAVAILABLE"
    LOCATION_TIMEOUT = "LOCATION_TIMEOUT"
    LIVENESS_FAILED = "LIVENESS_FAILED"
    LIVENESS_INCONCLUSIVE = "LIVENESS_INCONCLUSIVE"
    UNKNOWN = "UNKNOWN"


class LivenessOutcome(StrEnum):
    """Verdict of a liveness verifier."""

    PASS = "pass"
    FAIL = "fail"
    INCONCLUSIVE = "inconclusive"


LIVENESS_ACTIONS: tuple[str, ...] = (
    "Blink your eyes twice",
    "Turn your head slightly to the left",
    "Turn your head slightly to the right",
    "Smile for the camera",
    "Nod your head",
)


@dataclass(frozen=True)
class CheckpointConfig:
    """Declares which stages a checkpoint run requires."""

    requires_liveness: bool = False
    requires_location_check: bool = False
    target_coordinate: Coordinate | None = None
    allowed_radius_meters: float = 200.0
    camera_facing: CameraFacing = CameraFacing.USER
    secondary_capture: bool = False

    def __post_init__(self) -> None:
        if self.allowed_radius_meters < 0:
            raise ValueError("allowed_radius_meters must be non-negative")


@dataclass(frozen=True)
class CapturedPhoto:
    """A still frame grabbed from a camera stream."""

    data: bytes
    facing: CameraFacing
    captured_at: datetime

    def data_url(self) -> str:
        """Encode the frame as a base64 data URL."""
        return to_data_url(self.data)


@dataclass(frozen=True)
class CheckpointResult:
    """Outcome of a successful checkpoint run."""

    photo: CapturedPhoto
    coordinate: Coordinate | None
    distance_meters: float | None
    within_radius: bool
    captured_at: datetime
    secondary_photo: CapturedPhoto | None = None
    overridden: bool = False
    liveness_action: str | None = None

    @property
    def photos(self) -> tuple[CapturedPhoto, ...]:
        """Return the primary photo and, if taken, the secondary one."""
        if self.secondary_photo is None:
            return (self.photo,)
        return (self.photo, self.secondary_photo)


@dataclass(frozen=True)
class WorkflowSnapshot:
    """Read-only view of a run for observers."""

    run_id: int
    state: CheckpointState
    liveness_action: str | None = None
    distance_meters: float | None = None
    error_reason: ErrorReason | None = None
    error_message: str | None = None

    @property
    def is_terminal(self) -> bool:
        """Return true when the run can no longer change."""
        return self.state in TERMINAL_STATES


def to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL."""
    mime_type = detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
