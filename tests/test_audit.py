"""Tests for audit recording."""

from fieldforce.adapters.document_repositories import DocumentAuditRepository
from fieldforce.services.audit import CHECKPOINT_OVERRIDE, AuditService
from fieldforce.services.storage import InMemoryKeyValueStore
from tests.fakes import NOW, TWO_FIFTY_METERS_NORTH, make_result


def test_record_override() -> None:
    service = AuditService(DocumentAuditRepository(InMemoryKeyValueStore()))
    service.record_event("tour", "TR-001", "note", None, {"text": "hi"})

    service.record_override(
        "tour_checkpoint",
        "TR-001",
        make_result(
            TWO_FIFTY_METERS_NORTH,
            distance_meters=250.0,
            within_radius=False,
            overridden=True,
        ),
    )
    overrides = service.list_overrides()

    assert len(overrides) == 1
    event = overrides[0]
    assert event["event_type"] == CHECKPOINT_OVERRIDE
    assert event["entity_type"] == "tour_checkpoint"
    assert event["entity_id"] == "TR-001"
    assert event["after_json"] == {
        "distance_meters": 250.0,
        "coordinate": TWO_FIFTY_METERS_NORTH.as_dict(),
        "captured_at": NOW.isoformat(),
    }


def test_list_events_newest_first_with_limit() -> None:
    repository = DocumentAuditRepository(InMemoryKeyValueStore())
    for index in range(3):
        repository.create_event("tour", f"TR-00{index}", "note", None, None)

    events = repository.list_events(None, limit=2)

    assert [event["entity_id"] for event in events] == ["TR-002", "TR-001"]
