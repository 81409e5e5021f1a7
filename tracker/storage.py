"""Document store backends for tracker entities.

Supports SQL via SQLAlchemy (see ``tracker.db``), a JSON file (development)
and plain memory (tests, throwaway runs). All backends speak the same small
document protocol: find, find-by-id, save, find-and-update, find-and-remove.
"""

import asyncio
import json
import logging
import os
import secrets
from pathlib import Path
from typing import Optional, Protocol

from .config import StoreConfig
from .errors import PersistenceError

logger = logging.getLogger(__name__)

COLLECTIONS = ("clients", "projects", "tasks")


def new_object_id() -> str:
    """Generate a 24-hex-character document id."""
    return secrets.token_hex(12)


def check_collection(collection: str) -> None:
    if collection not in COLLECTIONS:
        raise ValueError(f"Unknown collection: {collection}")


class DocumentStore(Protocol):
    """Storage backend protocol.

    Documents are plain dicts keyed by field name; ``id`` is assigned by
    ``save``. Lookups and removals of absent ids return None.
    """

    async def find(self, collection: str) -> list[dict]:
        """Return all documents of a collection."""
        ...

    async def find_by_id(self, collection: str, doc_id: str) -> Optional[dict]:
        ...

    async def save(self, collection: str, doc: dict) -> dict:
        """Insert a new document, return it with its generated id."""
        ...

    async def find_by_id_and_update(
        self, collection: str, doc_id: str, changes: dict
    ) -> Optional[dict]:
        """Apply ``changes`` and return the updated document."""
        ...

    async def find_by_id_and_remove(self, collection: str, doc_id: str) -> Optional[dict]:
        """Remove a document and return it as it was."""
        ...

    async def init(self) -> None:
        """Prepare the backend (create tables, ...). Safe to call twice."""
        ...

    async def close(self) -> None:
        ...


class MemoryStore:
    """Process-local store. Data is gone when the process exits."""

    def __init__(self):
        self._data: dict[str, dict[str, dict]] = {c: {} for c in COLLECTIONS}
        self._lock = asyncio.Lock()

    async def _commit(self) -> None:
        """Hook for subclasses that persist after each write."""

    async def find(self, collection: str) -> list[dict]:
        check_collection(collection)
        return [dict(doc) for doc in self._data[collection].values()]

    async def find_by_id(self, collection: str, doc_id: str) -> Optional[dict]:
        check_collection(collection)
        doc = self._data[collection].get(doc_id)
        return dict(doc) if doc is not None else None

    async def save(self, collection: str, doc: dict) -> dict:
        check_collection(collection)
        async with self._lock:
            doc_id = new_object_id()
            while doc_id in self._data[collection]:
                doc_id = new_object_id()
            stored = {**doc, "id": doc_id}
            self._data[collection][doc_id] = stored
            try:
                await self._commit()
            except PersistenceError:
                del self._data[collection][doc_id]
                raise
        logger.debug(f"Saved {collection}/{doc_id}")
        return dict(stored)

    async def find_by_id_and_update(
        self, collection: str, doc_id: str, changes: dict
    ) -> Optional[dict]:
        check_collection(collection)
        async with self._lock:
            doc = self._data[collection].get(doc_id)
            if doc is None:
                return None
            updated = {**doc, **{k: v for k, v in changes.items() if k != "id"}}
            self._data[collection][doc_id] = updated
            try:
                await self._commit()
            except PersistenceError:
                self._data[collection][doc_id] = doc
                raise
        logger.debug(f"Updated {collection}/{doc_id}: {sorted(changes)}")
        return dict(updated)

    async def find_by_id_and_remove(self, collection: str, doc_id: str) -> Optional[dict]:
        check_collection(collection)
        async with self._lock:
            if doc_id not in self._data[collection]:
                return None
            doc = self._data[collection].pop(doc_id)
            try:
                await self._commit()
            except PersistenceError:
                self._data[collection][doc_id] = doc
                raise
        logger.debug(f"Removed {collection}/{doc_id}")
        return dict(doc)

    async def init(self) -> None:
        pass

    async def close(self) -> None:
        pass


class JSONFileStore(MemoryStore):
    """Simple JSON file store for development.

    Keeps every collection in a single JSON file, rewritten after each
    write. Good for small data sets when no database is configured.
    """

    def __init__(self, path: str = "data/tracker.json"):
        super().__init__()
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._data = self._load()

    def _load(self) -> dict[str, dict[str, dict]]:
        data: dict[str, dict[str, dict]] = {c: {} for c in COLLECTIONS}
        if not self.path.exists():
            logger.info(f"No store file at {self.path}, starting empty")
            return data
        try:
            raw = json.loads(self.path.read_text())
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
            raise PersistenceError(f"Could not read store file {self.path}: {e}") from e
        if not isinstance(raw, dict):
            raise PersistenceError(
                f"Store file {self.path} holds {type(raw).__name__}, expected an object"
            )
        for collection in COLLECTIONS:
            docs = raw.get(collection, [])
            if not isinstance(docs, list):
                raise PersistenceError(f"Store file {self.path}: {collection} is not a list")
            for doc in docs:
                if not isinstance(doc, dict) or not isinstance(doc.get("id"), str):
                    raise PersistenceError(
                        f"Store file {self.path}: {collection} entry without an id"
                    )
                data[collection][doc["id"]] = doc
        return data

    async def _commit(self) -> None:
        payload = {c: list(docs.values()) for c, docs in self._data.items()}
        # The target is only ever replaced whole
        tmp = self.path.with_name(f".{self.path.name}.tmp")
        try:
            tmp.write_text(json.dumps(payload, indent=2, default=str))
            os.replace(tmp, self.path)
        except OSError as e:
            tmp.unlink(missing_ok=True)
            raise PersistenceError(f"Could not write {self.path}: {e}") from e


def create_store(config: StoreConfig) -> DocumentStore:
    """Factory: creates the configured storage backend."""
    if config.backend == "sql":
        from .db.store import SQLStore
        return SQLStore(config.database_url, echo=config.echo)
    elif config.backend == "json":
        return JSONFileStore(config.json_path)
    elif config.backend == "memory":
        return MemoryStore()
    raise ValueError(f"Unknown store backend: {config.backend}")
