"""Exceptions raised by the checkpoint workflow and its collaborators."""

from fieldforce.domain.checkpoints import ErrorReason

USER_MESSAGES: dict[ErrorReason, str] = {
    ErrorReason.PERMISSION_DENIED: (
        "Access denied. Please enable camera and location permissions to continue."
    ),
    ErrorReason.DEVICE_BUSY: "The camera is in use by another app. Close it and retry.",
    ErrorReason.DEVICE_NOT_FOUND: "No camera was found on this device.",
    ErrorReason.CAMERA_TIMEOUT: "The camera took too long to start. Please retry.",
    ErrorReason.LOCATION_UNAVAILABLE: "Failed to retrieve location. Please enable GPS.",
    ErrorReason.LOCATION_TIMEOUT: "Timed out waiting for a GPS fix. Please retry.",
    ErrorReason.LIVENESS_FAILED: "Liveness check failed. Please try again.",
    ErrorReason.LIVENESS_INCONCLUSIVE: (
        "We couldn't confirm the liveness check. Improve lighting and retry."
    ),
    ErrorReason.UNKNOWN: "Something went wrong. Please try again.",
}


class CheckpointError(Exception):
    """A run-terminating failure with a typed reason."""

    def __init__(self, reason: ErrorReason, message: str | None = None) -> None:
        self.reason = reason
        self.message = message or USER_MESSAGES[reason]
        super().__init__(self.message)


class CameraError(CheckpointError):
    """Camera acquisition failed."""


class GeolocationError(CheckpointError):
    """A location fix could not be obtained."""


class CheckpointCancelledError(Exception):
    """The run was cancelled before producing a result."""


class FrameNotReadyError(Exception):
    """The stream has no decodable frame yet (zero-sized video)."""


class WorkflowStateError(RuntimeError):
    """An action is not valid in the current workflow state."""


class EntityNotFoundError(LookupError):
    """A tour, session or other record does not exist."""

    def __init__(self, entity_type: str, entity_id: str) -> None:
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} {entity_id} not found")


class InvalidTransitionError(ValueError):
    """A record is not in a status that allows the requested change."""


class TourStateError(InvalidTransitionError):
    """The tour cannot move to the requested phase or status."""


class SessionStateError(InvalidTransitionError):
    """The training session cannot move to the requested status."""
