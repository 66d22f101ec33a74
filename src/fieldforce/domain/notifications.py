"""Domain models for in-app notifications."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class NotificationType(StrEnum):
    PROJECT_ASSIGNED = "PROJECT_ASSIGNED"
    TRAINING_ASSIGNED = "TRAINING_ASSIGNED"
    CLAIM_PAID = "CLAIM_PAID"
    LEAVE_UPDATE = "LEAVE_UPDATE"
    GENERAL = "GENERAL"


@dataclass(frozen=True)
class Notification:
    """A message shown in the employee's inbox."""

    id: str
    type: NotificationType
    title: str
    message: str
    timestamp: datetime
    read: bool = False
    reference_id: str | None = None
    route: str | None = None
