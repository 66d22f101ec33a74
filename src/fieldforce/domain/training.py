"""Domain models for training sessions."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import StrEnum

from fieldforce.domain.geo import Coordinate


class TrainingRole(StrEnum):
    """Whether the employee attends or gives the session."""

    TRAINEE = "TRAINEE"
    TRAINER = "TRAINER"


class TrainingStatus(StrEnum):
    """Lifecycle of a training session."""

    DUE = "Due"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


@dataclass(frozen=True)
class TrainingSession:
    """A scheduled training session at a venue."""

    id: str
    project_name: str
    topic: str
    description: str
    start_date: datetime
    end_date: datetime
    location_name: str
    location_coordinate: Coordinate
    role: TrainingRole
    status: TrainingStatus
    start_photo: str | None = None
    completion_photo: str | None = None
    actual_start_time: datetime | None = None
    actual_end_time: datetime | None = None
    remarks: str | None = None
    start_overridden: bool = False
    start_distance_meters: float | None = None

    @property
    def duration(self) -> timedelta | None:
        """Time between the verified start and completion."""
        if self.actual_start_time is None or self.actual_end_time is None:
            return None
        return self.actual_end_time - self.actual_start_time
