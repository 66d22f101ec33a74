"""Inbox services."""

import uuid
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Protocol

from fieldforce.domain.errors import EntityNotFoundError
from fieldforce.domain.notifications import Notification, NotificationType


class NotificationRepository(Protocol):
    """Persistence interface for notifications."""

    def list_notifications(self) -> list[Notification]:
        """Return all notifications in stored order."""

    def save_notifications(self, notifications: list[Notification]) -> None:
        """Replace the stored notifications."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class NotificationService:
    """Application service for the notification inbox."""

    repository: NotificationRepository
    clock: Callable[[], datetime] = _utcnow

    def list_notifications(self) -> list[Notification]:
        """Return notifications newest first."""
        return sorted(
            self.repository.list_notifications(),
            key=lambda item: item.timestamp,
            reverse=True,
        )

    def unread_count(self) -> int:
        return sum(1 for item in self.repository.list_notifications() if not item.read)

    def notify(
        self,
        notification_type: NotificationType,
        title: str,
        message: str,
        reference_id: str | None = None,
        route: str | None = None,
    ) -> Notification:
        """Add an unread notification to the inbox."""
        notification = Notification(
            id=f"n-{uuid.uuid4().hex[:12]}",
            type=notification_type,
            title=title,
            message=message,
            timestamp=self.clock(),
            reference_id=reference_id,
            route=route,
        )
        self.repository.save_notifications(
            [notification, *self.repository.list_notifications()]
        )
        return notification

    def mark_read(self, notification_id: str) -> Notification:
        """Mark one notification as read."""
        notifications = self.repository.list_notifications()
        for index, item in enumerate(notifications):
            if item.id == notification_id:
                updated = _read(item)
                notifications[index] = updated
                self.repository.save_notifications(notifications)
                return updated
        raise EntityNotFoundError("Notification", notification_id)

    def mark_all_read(self) -> int:
        """Mark every notification as read and return how many changed."""
        notifications = self.repository.list_notifications()
        changed = sum(1 for item in notifications if not item.read)
        if changed:
            self.repository.save_notifications([_read(item) for item in notifications])
        return changed


def _read(notification: Notification) -> Notification:
    if notification.read:
        return notification
    return replace(notification, read=True)
