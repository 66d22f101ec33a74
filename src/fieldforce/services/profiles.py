"""Checkpoint configurations for each place a photo check is required."""

from dataclasses import dataclass

from fieldforce.domain.checkpoints import CameraFacing, CheckpointConfig
from fieldforce.domain.geo import UNSET_COORDINATE
from fieldforce.domain.tours import Tour, TourPhase
from fieldforce.domain.training import TrainingSession


@dataclass(frozen=True)
class CheckpointProfiles:
    """Builds the run configuration for attendance, tours and training."""

    radius_meters: float = 200.0

    def attendance_punch(self) -> CheckpointConfig:
        return CheckpointConfig(
            requires_liveness=True,
            requires_location_check=True,
            camera_facing=CameraFacing.USER,
        )

    def tour_start(self) -> CheckpointConfig:
        """Selfie, then the vehicle plate from the rear camera."""
        return CheckpointConfig(
            requires_location_check=True,
            camera_facing=CameraFacing.USER,
            secondary_capture=True,
        )

    def tour_checkpoint(self, tour: Tour) -> CheckpointConfig:
        """Arrival and return start are checked against the destination."""
        if tour.phase == TourPhase.RETURN:
            return CheckpointConfig(
                requires_liveness=True,
                requires_location_check=True,
                camera_facing=CameraFacing.USER,
            )
        return CheckpointConfig(
            requires_liveness=True,
            requires_location_check=True,
            target_coordinate=tour.to_coordinate or UNSET_COORDINATE,
            allowed_radius_meters=self.radius_meters,
            camera_facing=CameraFacing.USER,
        )

    def session_start(self, session: TrainingSession) -> CheckpointConfig:
        return CheckpointConfig(
            requires_location_check=True,
            target_coordinate=session.location_coordinate,
            allowed_radius_meters=self.radius_meters,
            camera_facing=CameraFacing.ENVIRONMENT,
        )

    def session_end(self) -> CheckpointConfig:
        return CheckpointConfig(camera_facing=CameraFacing.ENVIRONMENT)
