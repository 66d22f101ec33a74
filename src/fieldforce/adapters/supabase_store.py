"""Supabase-backed key-value store."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from fieldforce.services.storage import KeyValueStore, Records


@dataclass
class SupabaseKeyValueStore(KeyValueStore):
    """Stores each collection as one JSON document row."""

    client: Client
    table: str = "kv_collections"

    def get(self, collection: str, default: Records | None = None) -> Records:
        """Return the stored document for a collection."""
        response = (
            self.client.table(self.table)
            .select("key, document")
            .eq("key", collection)
            .limit(1)
            .execute()
        )
        if not response.data:
            return list(default) if default is not None else []
        document = response.data[0].get("document")
        if not isinstance(document, list):
            return [document] if document else []
        return document

    def put(self, collection: str, records: Records) -> None:
        """Upsert the document for a collection."""
        self.client.table(self.table).upsert(
            {
                "key": collection,
                "document": records,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            }
        ).execute()
