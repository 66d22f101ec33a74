"""Tests for Supabase adapter implementations."""

from dataclasses import dataclass, field

from fieldforce.adapters.supabase_audit_repository import SupabaseAuditRepository
from fieldforce.adapters.supabase_store import SupabaseKeyValueStore


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    responses: list[list[dict[str, object]]] = field(default_factory=list)
    last_action: str | None = None
    last_payload: object | None = None
    last_filters: list[tuple[str, object]] = field(default_factory=list)
    last_order: tuple[str, bool] | None = None
    last_limit: int | None = None

    def select(self, *_args) -> "FakeTable":
        self.last_action = "select"
        return self

    def insert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_action = "insert"
        self.last_payload = payload
        return self

    def upsert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_action = "upsert"
        self.last_payload = payload
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def order(self, column: str, desc: bool = False) -> "FakeTable":
        self.last_order = (column, desc)
        return self

    def limit(self, count: int) -> "FakeTable":
        self.last_limit = count
        return self

    def execute(self) -> FakeResponse:
        data = self.responses.pop(0) if self.responses else []
        return FakeResponse(data=data)


@dataclass
class FakeClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        return self.tables.setdefault(name, FakeTable(name))


def test_store_get_missing_returns_default() -> None:
    client = FakeClient()
    store = SupabaseKeyValueStore(client)  # type: ignore[arg-type]

    assert store.get("tours_data", [{"id": "TR-001"}]) == [{"id": "TR-001"}]
    assert client.tables["kv_collections"].last_filters == [("key", "tours_data")]


def test_store_get_document() -> None:
    client = FakeClient()
    client.table("kv_collections").responses.append(
        [{"key": "tours_data", "document": [{"id": "TR-002"}]}]
    )
    store = SupabaseKeyValueStore(client)  # type: ignore[arg-type]

    assert store.get("tours_data") == [{"id": "TR-002"}]


def test_store_put_upserts_document() -> None:
    client = FakeClient()
    store = SupabaseKeyValueStore(client)  # type: ignore[arg-type]

    store.put("notifications", [{"id": "n1"}])

    table = client.tables["kv_collections"]
    assert table.last_action == "upsert"
    assert table.last_payload["key"] == "notifications"
    assert table.last_payload["document"] == [{"id": "n1"}]


def test_audit_repository_insert_and_list() -> None:
    client = FakeClient()
    repository = SupabaseAuditRepository(client)  # type: ignore[arg-type]

    repository.create_event("tour", "TR-001", "checkpoint_override", None, {"a": 1})
    table = client.tables["audit_events"]
    assert table.last_payload["entity_id"] == "TR-001"
    assert table.last_payload["after_json"] == {"a": 1}

    table.responses.append([{"id": "evt-1"}])
    events = repository.list_events("checkpoint_override", limit=5)

    assert events == [{"id": "evt-1"}]
    assert ("event_type", "checkpoint_override") in table.last_filters
    assert table.last_order == ("created_at", True)
    assert table.last_limit == 5
