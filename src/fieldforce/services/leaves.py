"""Leave application services."""

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Protocol

from fieldforce.domain.leaves import LeaveRequest, LeaveStatus, LeaveType
from fieldforce.domain.notifications import NotificationType
from fieldforce.services.notifications import NotificationService

logger = logging.getLogger(__name__)


class LeaveRepository(Protocol):
    """Persistence interface for leave requests."""

    def list_leaves(self) -> list[LeaveRequest]:
        """Return leave requests, newest first."""

    def add_leave(self, leave: LeaveRequest) -> None:
        """Store a new request ahead of the existing ones."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class LeaveService:
    """Application service for applying for and listing leave."""

    repository: LeaveRepository
    notifications: NotificationService
    clock: Callable[[], datetime] = _utcnow

    def list_leaves(self, status: LeaveStatus | None = None) -> list[LeaveRequest]:
        """Return requests, optionally filtered by status."""
        leaves = self.repository.list_leaves()
        if status is None:
            return leaves
        return [leave for leave in leaves if leave.status == status]

    def apply(
        self, leave_type: LeaveType, start_date: date, end_date: date, reason: str
    ) -> LeaveRequest:
        """Submit a pending leave request and acknowledge it in the inbox."""
        reason = reason.strip()
        if not reason:
            raise ValueError("A reason is required")
        if end_date < start_date:
            raise ValueError("End date cannot be before start date")
        now = self.clock()
        leave = LeaveRequest(
            id=f"L-{uuid.uuid4().hex[:10]}",
            type=leave_type,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            status=LeaveStatus.PENDING,
            applied_on=now,
        )
        self.repository.add_leave(leave)
        logger.info("Leave applied", extra={"leave_id": leave.id, "days": leave.days})
        self.notifications.notify(
            NotificationType.LEAVE_UPDATE,
            title="Leave Application Received",
            message=(
                f"Your leave request for {leave.reason} has been received "
                "and is under review."
            ),
            reference_id=leave.id,
            route="/hr",
        )
        return leave
