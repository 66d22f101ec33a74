"""Training session services."""

import logging
from dataclasses import dataclass, replace
from datetime import timedelta
from typing import Protocol

from fieldforce.domain.checkpoints import CheckpointResult
from fieldforce.domain.errors import EntityNotFoundError, SessionStateError
from fieldforce.domain.training import TrainingRole, TrainingSession, TrainingStatus

logger = logging.getLogger(__name__)


class TrainingRepository(Protocol):
    """Persistence interface for training sessions."""

    def list_sessions(self) -> list[TrainingSession]:
        """Return all sessions."""

    def get_session(self, session_id: str) -> TrainingSession | None:
        """Return a session by id, if present."""

    def save_session(self, session: TrainingSession) -> None:
        """Replace the stored session with the same id."""


@dataclass
class TrainingService:
    """Application service for attending and giving training."""

    repository: TrainingRepository

    def list_sessions(self, role: TrainingRole | None = None) -> list[TrainingSession]:
        """Return sessions for a role, earliest first."""
        sessions = self.repository.list_sessions()
        if role is not None:
            sessions = [session for session in sessions if session.role == role]
        return sorted(sessions, key=lambda session: session.start_date)

    def get_session(self, session_id: str) -> TrainingSession:
        session = self.repository.get_session(session_id)
        if session is None:
            raise EntityNotFoundError("TrainingSession", session_id)
        return session

    def prepare_start(self, session_id: str) -> TrainingSession:
        """Return the session if it is due to start."""
        return self._require(session_id, TrainingStatus.DUE)

    def prepare_completion(self, session_id: str) -> TrainingSession:
        """Return the session if it is running."""
        return self._require(session_id, TrainingStatus.IN_PROGRESS)

    def start_session(
        self, session_id: str, result: CheckpointResult
    ) -> TrainingSession:
        """Mark a due session as started at the verified venue."""
        session = self.prepare_start(session_id)
        updated = replace(
            session,
            status=TrainingStatus.IN_PROGRESS,
            start_photo=result.photo.data_url(),
            actual_start_time=result.captured_at,
            start_overridden=result.overridden,
            start_distance_meters=result.distance_meters,
        )
        self.repository.save_session(updated)
        logger.info("Training session started", extra={"session_id": session_id})
        return updated

    def complete_session(
        self, session_id: str, result: CheckpointResult, remarks: str | None = None
    ) -> TrainingSession:
        """Close an in-progress session with a completion photo."""
        session = self.prepare_completion(session_id)
        updated = replace(
            session,
            status=TrainingStatus.COMPLETED,
            completion_photo=result.photo.data_url(),
            actual_end_time=result.captured_at,
            remarks=(remarks or "").strip() or None,
        )
        self.repository.save_session(updated)
        logger.info("Training session completed", extra={"session_id": session_id})
        return updated

    def duration(self, session_id: str) -> timedelta | None:
        """Return how long a completed session actually ran."""
        return self.get_session(session_id).duration

    def _require(self, session_id: str, status: TrainingStatus) -> TrainingSession:
        session = self.get_session(session_id)
        if session.status != status:
            raise SessionStateError(f"Session {session_id} is {session.status}")
        return session
