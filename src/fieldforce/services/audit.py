"""Audit logging service."""

from dataclasses import dataclass
from typing import Protocol

from fieldforce.domain.checkpoints import CheckpointResult

CHECKPOINT_OVERRIDE = "checkpoint_override"


class AuditRepository(Protocol):
    """Persistence interface for audit events."""

    def create_event(
        self,
        entity_type: str,
        entity_id: str,
        event_type: str,
        before: dict[str, object] | None,
        after: dict[str, object] | None,
    ) -> None:
        """Create an audit event row."""

    def list_events(
        self, event_type: str | None, limit: int
    ) -> list[dict[str, object]]:
        """Return recent audit events, newest first."""


@dataclass
class AuditService:
    """Service for recording audit events."""

    repository: AuditRepository

    def record_event(
        self,
        entity_type: str,
        entity_id: str,
        event_type: str,
        before: dict[str, object] | None,
        after: dict[str, object] | None,
    ) -> None:
        """Persist an audit event."""
        self.repository.create_event(
            entity_type=entity_type,
            entity_id=entity_id,
            event_type=event_type,
            before=before,
            after=after,
        )

    def record_override(
        self, purpose: str, entity_id: str, result: CheckpointResult
    ) -> None:
        """Record that a checkpoint was accepted outside its radius."""
        self.record_event(
            entity_type=purpose,
            entity_id=entity_id,
            event_type=CHECKPOINT_OVERRIDE,
            before=None,
            after={
                "distance_meters": result.distance_meters,
                "coordinate": result.coordinate.as_dict()
                if result.coordinate
                else None,
                "captured_at": result.captured_at.isoformat(),
            },
        )

    def list_overrides(self, limit: int = 50) -> list[dict[str, object]]:
        """Return recent checkpoint overrides."""
        return self.repository.list_events(CHECKPOINT_OVERRIDE, limit)
