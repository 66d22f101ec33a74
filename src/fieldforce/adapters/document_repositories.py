"""Entity repositories stored as JSON collections in a key-value store."""

import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TypeVar

from pydantic import TypeAdapter

from fieldforce.domain.attendance import AttendanceLog, AttendanceState
from fieldforce.domain.leaves import LeaveRequest
from fieldforce.domain.notifications import Notification
from fieldforce.domain.sites import Site
from fieldforce.domain.tours import Tour
from fieldforce.domain.training import TrainingSession
from fieldforce.seeds import seed_notifications, seed_tours, seed_training_sessions
from fieldforce.services.attendance import AttendanceRepository
from fieldforce.services.audit import AuditRepository
from fieldforce.services.leaves import LeaveRepository
from fieldforce.services.notifications import NotificationRepository
from fieldforce.services.sites import SiteRepository
from fieldforce.services.storage import KeyValueStore
from fieldforce.services.tours import TourRepository
from fieldforce.services.training import TrainingRepository

TOURS_KEY = "tours_data"
TRAINING_KEY = "training_sessions"
SITES_KEY = "known_sites"
ATTENDANCE_STATE_KEY = "attendance_state"
ATTENDANCE_HISTORY_KEY = "attendance_history"
LEAVES_KEY = "leave_requests"
NOTIFICATIONS_KEY = "notifications"
AUDIT_KEY = "audit_events"

T = TypeVar("T")

_TOURS = TypeAdapter(list[Tour])
_SESSIONS = TypeAdapter(list[TrainingSession])
_SITES = TypeAdapter(list[Site])
_ATTENDANCE_STATE = TypeAdapter(AttendanceState)
_ATTENDANCE_HISTORY = TypeAdapter(list[AttendanceLog])
_LEAVES = TypeAdapter(list[LeaveRequest])
_NOTIFICATIONS = TypeAdapter(list[Notification])


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def _load(
    store: KeyValueStore,
    key: str,
    adapter: TypeAdapter[list[T]],
    seed: Callable[[], list[T]] | None = None,
) -> list[T]:
    default = adapter.dump_python(seed(), mode="json") if seed else None
    return adapter.validate_python(store.get(key, default))


def _save(
    store: KeyValueStore, key: str, adapter: TypeAdapter[list[T]], items: list[T]
) -> None:
    store.put(key, adapter.dump_python(items, mode="json"))


def _upsert(items: list[T], item: T, key: Callable[[T], str]) -> list[T]:
    """Replace the item with the same id in place, or prepend it."""
    replaced = False
    updated = []
    for existing in items:
        if key(existing) == key(item):
            updated.append(item)
            replaced = True
        else:
            updated.append(existing)
    return updated if replaced else [item, *updated]


@dataclass
class DocumentTourRepository(TourRepository):
    """Tours under ``tours_data``."""

    store: KeyValueStore
    clock: Callable[[], datetime] = _utcnow

    def list_tours(self) -> list[Tour]:
        return _load(self.store, TOURS_KEY, _TOURS, lambda: seed_tours(self.clock()))

    def get_tour(self, tour_id: str) -> Tour | None:
        return next((tour for tour in self.list_tours() if tour.id == tour_id), None)

    def save_tour(self, tour: Tour) -> None:
        tours = _upsert(self.list_tours(), tour, key=lambda item: item.id)
        _save(self.store, TOURS_KEY, _TOURS, tours)


@dataclass
class DocumentTrainingRepository(TrainingRepository):
    """Training sessions under ``training_sessions``."""

    store: KeyValueStore
    clock: Callable[[], datetime] = _utcnow

    def list_sessions(self) -> list[TrainingSession]:
        return _load(
            self.store,
            TRAINING_KEY,
            _SESSIONS,
            lambda: seed_training_sessions(self.clock()),
        )

    def get_session(self, session_id: str) -> TrainingSession | None:
        return next(
            (session for session in self.list_sessions() if session.id == session_id),
            None,
        )

    def save_session(self, session: TrainingSession) -> None:
        sessions = _upsert(self.list_sessions(), session, key=lambda item: item.id)
        _save(self.store, TRAINING_KEY, _SESSIONS, sessions)


@dataclass
class DocumentSiteRepository(SiteRepository):
    """Sites defined on the device under ``known_sites``."""

    store: KeyValueStore

    def list_sites(self) -> list[Site]:
        return _load(self.store, SITES_KEY, _SITES)

    def add_site(self, site: Site) -> None:
        _save(self.store, SITES_KEY, _SITES, [site, *self.list_sites()])


@dataclass
class DocumentAttendanceRepository(AttendanceRepository):
    """Punch state and daily history."""

    store: KeyValueStore

    def get_state(self) -> AttendanceState:
        records = self.store.get(ATTENDANCE_STATE_KEY)
        if not records:
            return AttendanceState()
        return _ATTENDANCE_STATE.validate_python(records[0])

    def save_state(self, state: AttendanceState) -> None:
        self.store.put(
            ATTENDANCE_STATE_KEY, [_ATTENDANCE_STATE.dump_python(state, mode="json")]
        )

    def list_history(self) -> list[AttendanceLog]:
        return _load(self.store, ATTENDANCE_HISTORY_KEY, _ATTENDANCE_HISTORY)

    def save_history(self, history: list[AttendanceLog]) -> None:
        _save(self.store, ATTENDANCE_HISTORY_KEY, _ATTENDANCE_HISTORY, history)


@dataclass
class DocumentLeaveRepository(LeaveRepository):
    """Leave applications under ``leave_requests``."""

    store: KeyValueStore

    def list_leaves(self) -> list[LeaveRequest]:
        return _load(self.store, LEAVES_KEY, _LEAVES)

    def add_leave(self, leave: LeaveRequest) -> None:
        _save(self.store, LEAVES_KEY, _LEAVES, [leave, *self.list_leaves()])


@dataclass
class DocumentNotificationRepository(NotificationRepository):
    """Inbox under ``notifications``."""

    store: KeyValueStore
    clock: Callable[[], datetime] = _utcnow

    def list_notifications(self) -> list[Notification]:
        return _load(
            self.store,
            NOTIFICATIONS_KEY,
            _NOTIFICATIONS,
            lambda: seed_notifications(self.clock()),
        )

    def save_notifications(self, notifications: list[Notification]) -> None:
        _save(self.store, NOTIFICATIONS_KEY, _NOTIFICATIONS, notifications)


@dataclass
class DocumentAuditRepository(AuditRepository):
    """Audit events appended to ``audit_events``."""

    store: KeyValueStore
    clock: Callable[[], datetime] = _utcnow

    def create_event(
        self,
        entity_type: str,
        entity_id: str,
        event_type: str,
        before: dict[str, object] | None,
        after: dict[str, object] | None,
    ) -> None:
        """Append an audit event."""
        events = self.store.get(AUDIT_KEY)
        events.insert(
            0,
            {
                "id": uuid.uuid4().hex,
                "entity_type": entity_type,
                "entity_id": entity_id,
                "event_type": event_type,
                "before_json": before,
                "after_json": after,
                "created_at": self.clock().isoformat(),
            },
        )
        self.store.put(AUDIT_KEY, events)

    def list_events(
        self, event_type: str | None, limit: int
    ) -> list[dict[str, object]]:
        """Return recent events, newest first."""
        events = self.store.get(AUDIT_KEY)
        if event_type is not None:
            events = [
                event for event in events if event.get("event_type") == event_type
            ]
        return events[:limit]
