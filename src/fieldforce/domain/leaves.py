"""Domain models for leave applications."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum


class LeaveType(StrEnum):
    CASUAL = "Casual"
    SICK = "Sick"
    EARNED = "Earned"
    EMERGENCY = "Emergency"


class LeaveStatus(StrEnum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


@dataclass(frozen=True)
class LeaveRequest:
    """A leave application awaiting or past review."""

    id: str
    type: LeaveType
    start_date: date
    end_date: date
    reason: str
    status: LeaveStatus
    applied_on: datetime

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days + 1
