"""Key-value store persisted as one JSON file per collection."""

import json
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path

from fieldforce.services.storage import KeyValueStore, Records

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_\-]+$")


@dataclass
class JsonFileKeyValueStore(KeyValueStore):
    """Device-local store writing ``<data_dir>/<collection>.json``."""

    data_dir: Path

    @classmethod
    def create(cls, data_dir: str) -> "JsonFileKeyValueStore":
        """Create a store, making the data directory if needed."""
        path = Path(data_dir)
        path.mkdir(parents=True, exist_ok=True)
        return cls(data_dir=path)

    def get(self, collection: str, default: Records | None = None) -> Records:
        """Read a collection, falling back to ``default`` when absent or corrupt."""
        path = self._path(collection)
        fallback = list(default) if default is not None else []
        if not path.exists():
            return fallback
        try:
            document = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.exception("Corrupt collection file", extra={"path": str(path)})
            return fallback
        if not isinstance(document, list):
            # Single-record collections (attendance state) are stored bare.
            return [document]
        return document

    def put(self, collection: str, records: Records) -> None:
        """Write a collection atomically."""
        path = self._path(collection)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(records), encoding="utf-8")
        os.replace(tmp_path, path)

    def _path(self, collection: str) -> Path:
        if not _SAFE_KEY.match(collection):
            raise ValueError(f"Invalid collection name: {collection!r}")
        return self.data_dir / f"{collection}.json"
