"""
Collection store implementations.

A store persists named collections (``users``, ``entries``, ``votes``) as
whole lists of JSON-compatible records. Every ``save`` replaces the full
contents of a collection; there is no append mode and no atomicity across
collections.
"""

import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

from backend.app.core.exceptions import StorageError

logger = logging.getLogger(__name__)

Record = dict[str, Any]


class CollectionStore(Protocol):
    """Protocol for collection persistence backends."""

    def load(self, collection: str, default: list[Record] | None = None) -> list[Record]:
        """
        Load every record of a collection.

        Args:
            collection: Collection name
            default: Records to use when the collection has never been saved

        Returns:
            List of records (empty when missing and no default given)
        """
        ...

    def save(self, collection: str, records: list[Record]) -> None:
        """Overwrite a collection with the given records."""
        ...


class JsonFileStore:
    """
    Store each collection as a JSON array in ``<data_dir>/<collection>.json``.

    Writes go through a temporary file in the same directory followed by an
    atomic rename, so a reader never observes a half-written file.
    """

    def __init__(self, data_dir: str | Path):
        self.data_dir = Path(data_dir)

    def _path(self, collection: str) -> Path:
        return self.data_dir / f"{collection}.json"

    def load(self, collection: str, default: list[Record] | None = None) -> list[Record]:
        path = self._path(collection)
        if not path.exists():
            logger.info(f"[STORE] No file for '{collection}' at {path}, starting {'from seed' if default else 'empty'}")
            return copy.deepcopy(default) if default else []

        try:
            with path.open("r", encoding="utf-8") as f:
                records = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(collection, "load", e) from e

        if not isinstance(records, list):
            raise StorageError(collection, "load", ValueError(f"{path} does not contain a JSON array"))

        logger.info(f"[STORE] Loaded {len(records)} records from {path}")
        return records

    def save(self, collection: str, records: list[Record]) -> None:
        path = self._path(collection)
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=f".{collection}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(records, f, indent=2, ensure_ascii=False)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(collection, "save", e) from e

        logger.debug(f"[STORE] Saved {len(records)} records to {path}")


class InMemoryStore:
    """Store that keeps collections in a dict. Used in tests and for ephemeral runs."""

    def __init__(self, initial: dict[str, list[Record]] | None = None):
        self.collections: dict[str, list[Record]] = copy.deepcopy(initial) if initial else {}
        self.save_count: dict[str, int] = {}

    def load(self, collection: str, default: list[Record] | None = None) -> list[Record]:
        if collection not in self.collections:
            return copy.deepcopy(default) if default else []
        return copy.deepcopy(self.collections[collection])

    def save(self, collection: str, records: list[Record]) -> None:
        self.collections[collection] = copy.deepcopy(records)
        self.save_count[collection] = self.save_count.get(collection, 0) + 1
