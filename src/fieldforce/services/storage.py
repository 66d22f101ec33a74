"""Flat key-value persistence for entity collections."""

import copy
from dataclasses import dataclass, field
from typing import Protocol

Records = list[dict[str, object]]


class KeyValueStore(Protocol):
    """String-keyed collections, one JSON document per key. Last write wins."""

    def get(self, collection: str, default: Records | None = None) -> Records:
        """Return the stored records, or ``default`` (or []) when absent."""

    def put(self, collection: str, records: Records) -> None:
        """Replace the stored records for a collection."""


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """In-process store for tests and ephemeral runs."""

    _documents: dict[str, Records] = field(default_factory=dict)

    def get(self, collection: str, default: Records | None = None) -> Records:
        """Return a copy of the stored records."""
        if collection not in self._documents:
            return copy.deepcopy(default) if default is not None else []
        return copy.deepcopy(self._documents[collection])

    def put(self, collection: str, records: Records) -> None:
        """Store a copy of the records."""
        self._documents[collection] = copy.deepcopy(records)
