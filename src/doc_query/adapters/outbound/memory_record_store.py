"""In-memory record store adapter.

This adapter implements the RecordStore protocol with per-collection
insertion-ordered dictionaries. Data lives only as long as the process.

Key concepts:
- Collection: A named, insertion-ordered map of primary key to Record
- Write scope: A re-entrant critical section with rollback on error
- Undo journal: Per-scope log of inserted and removed records plus body
  copies of the records the caller declared it will mutate. Rolling back
  replays the journal in reverse; the rest of the store is never copied.

Thread Safety:
    A single re-entrant lock guards both reads and write scopes, so a
    reader never observes a half-applied scope. Nested scopes join the
    outermost one; only the outermost scope commits or rolls back.

Usage:
    with InMemoryRecordStore() as store:
        rec = store.create("User", {"name": "Alice"})
        with store.write_scope([rec]):
            rec.assign(FieldPath.parse("name"), "Alicia")
"""

from __future__ import annotations

import copy
import itertools
import threading
import uuid
from collections.abc import Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Iterator, NamedTuple

from doc_query.domain.entities import DEFAULT_KEYS, Record, RecordKeys
from doc_query.domain.exceptions import InvalidExpression
from doc_query.domain.services import Clock, utc_now
from doc_query.infrastructure.logging import get_logger
from doc_query.ports.outbound.record_store import DuplicateRecordError, StoreUnavailable

logger = get_logger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


class _Change(NamedTuple):
    removed: bool
    collection: str
    record_id: str
    position: int
    record: Record | None = None


@dataclass
class _Journal:
    """Undo information for the open outermost write scope."""

    changes: list[_Change] = field(default_factory=list)
    bodies: dict[int, tuple[Record, dict[str, Any]]] = field(default_factory=dict)

    def track(self, records: Iterable[Record]) -> None:
        for record in records:
            if id(record) not in self.bodies:
                self.bodies[id(record)] = (record, copy.deepcopy(record.data))


class InMemoryRecordStore:
    """In-memory implementation of RecordStore.

    Attributes:
        keys: Reserved field names used for ids and timestamps.
    """

    def __init__(
        self,
        keys: RecordKeys = DEFAULT_KEYS,
        clock: Clock = utc_now,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        """Initialize an empty, closed store.

        Args:
            keys: Reserved field names.
            clock: Source of creation timestamps.
            id_factory: Source of primary keys for new records.
        """
        self._keys = keys
        self._clock = clock
        self._id_factory = id_factory

        self._lock = threading.RLock()
        self._collections: dict[str, dict[str, Record]] = {}
        self._positions: dict[tuple[str, str], int] = {}
        self._sequence = itertools.count()
        self._open = False

        self._scope_depth = 0
        self._journal: _Journal | None = None

    # ------------------ Lifecycle ------------------

    @property
    def keys(self) -> RecordKeys:
        return self._keys

    @property
    def is_initialized(self) -> bool:
        return self._open

    def open(self) -> None:
        """Make the store usable. Reopening a closed store keeps its data."""
        with self._lock:
            self._open = True
        logger.debug("record_store_opened", collections=len(self._collections))

    def close(self) -> None:
        """Refuse further calls until reopened.

        Raises:
            RuntimeError: If called from inside a write scope.
        """
        with self._lock:
            if self._scope_depth:
                raise RuntimeError("Cannot close the store inside a write scope")
            self._open = False
        logger.debug("record_store_closed")

    def __enter__(self) -> InMemoryRecordStore:
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _ensure_open(self) -> None:
        if not self._open:
            raise StoreUnavailable("Record store is not initialized")

    # ------------------ RecordStore ------------------

    def create(self, collection: str, obj: Mapping[str, Any]) -> Record:
        """Store a new record, assigning id and timestamps unless supplied.

        Raises:
            StoreUnavailable: If the store is not open.
            InvalidExpression: If obj is not a mapping or its id is not a string.
            DuplicateRecordError: If the id already exists in the collection.
        """
        self._ensure_open()
        if not isinstance(obj, Mapping):
            raise InvalidExpression(f"Document must be a mapping, got {type(obj).__name__}")

        now = self._clock()
        data: dict[str, Any] = {
            self._keys.id_field: self._id_factory(),
            self._keys.created_at_field: now,
            self._keys.updated_at_field: now,
        }
        data.update(copy.deepcopy(dict(obj)))

        record_id = data[self._keys.id_field]
        if not isinstance(record_id, str):
            raise InvalidExpression(
                f"Primary key must be a string, got {type(record_id).__name__}",
                path=self._keys.id_field,
            )

        record = Record(collection=collection, data=data, keys=self._keys)
        with self.write_scope():
            records = self._collections.setdefault(collection, {})
            if record_id in records:
                raise DuplicateRecordError(collection, record_id)
            position = next(self._sequence)
            records[record_id] = record
            self._positions[(collection, record_id)] = position
            self._journal.changes.append(_Change(False, collection, record_id, position))
        return record

    def all_of(self, collection: str) -> list[Record]:
        """Return the collection's records in insertion order."""
        self._ensure_open()
        with self._lock:
            return list(self._collections.get(collection, {}).values())

    def delete(self, records: Iterable[Record]) -> int:
        """Remove records by collection and id; unknown records are skipped."""
        self._ensure_open()
        removed = 0
        with self.write_scope():
            for record in records:
                if self._remove(record.collection, record.id) is not None:
                    removed += 1
        return removed

    @contextmanager
    def write_scope(self, records: Iterable[Record] = ()) -> Iterator[None]:
        """Atomic write scope; rolls back the outermost scope on error.

        Args:
            records: Existing records the caller is about to mutate in
                place. Their bodies are restored on rollback. Creates and
                deletes made through the store are journaled without this.
        """
        self._ensure_open()
        with self._lock:
            outermost = self._scope_depth == 0
            if outermost:
                self._journal = _Journal()
            self._journal.track(records)
            self._scope_depth += 1
            try:
                yield
            except BaseException:
                if outermost:
                    self._rollback(self._journal)
                    logger.warning("write_scope_rolled_back")
                raise
            finally:
                self._scope_depth -= 1
                if outermost:
                    self._journal = None

    # ------------------ Introspection ------------------

    def collections(self) -> list[str]:
        """List collection names that currently hold at least one record."""
        self._ensure_open()
        with self._lock:
            return [name for name, records in self._collections.items() if records]

    def clear(self) -> None:
        """Drop every record in every collection."""
        self._ensure_open()
        with self.write_scope():
            for name, records in list(self._collections.items()):
                for record_id in list(records):
                    self._remove(name, record_id)

    def __len__(self) -> int:
        with self._lock:
            return sum(len(records) for records in self._collections.values())

    # ------------------ Journal ------------------

    def _remove(self, collection: str, record_id: str) -> Record | None:
        stored = self._collections.get(collection)
        if stored is None:
            return None
        record = stored.pop(record_id, None)
        if record is not None:
            position = self._positions.pop((collection, record_id))
            self._journal.changes.append(
                _Change(True, collection, record_id, position, record)
            )
        return record

    def _rollback(self, journal: _Journal) -> None:
        reinserted: set[str] = set()
        for change in reversed(journal.changes):
            records = self._collections.setdefault(change.collection, {})
            key = (change.collection, change.record_id)
            if change.removed:
                records[change.record_id] = change.record
                self._positions[key] = change.position
                reinserted.add(change.collection)
            else:
                records.pop(change.record_id, None)
                self._positions.pop(key, None)

        # Re-inserted records go back to their original insertion slot.
        for collection in reinserted:
            records = self._collections[collection]
            self._collections[collection] = dict(
                sorted(records.items(), key=lambda item: self._positions[(collection, item[0])])
            )

        for record, body in journal.bodies.values():
            record.data = body
