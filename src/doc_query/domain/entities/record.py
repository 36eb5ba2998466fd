"""Record entity: one schema-less document owned by a record store.

A record is a mutable mapping of field name to value plus three reserved
fields: an opaque string primary key and the creation and modification
timestamps. Everything else is free-form and may nest to any depth.

Records are identity objects. Two records holding equal data are still
different records unless they share a primary key in the same collection.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterator

from doc_query.domain.services.paths import assign_path
from doc_query.domain.value_objects import ABSENT, FieldPath


@dataclass(frozen=True, slots=True)
class RecordKeys:
    """Names of the reserved fields every record carries."""

    id_field: str = "_id"
    created_at_field: str = "createdAt"
    updated_at_field: str = "updatedAt"

    @property
    def reserved(self) -> frozenset[str]:
        return frozenset({self.id_field, self.created_at_field, self.updated_at_field})


DEFAULT_KEYS = RecordKeys()


@dataclass(eq=False)
class Record:
    """A stored document.

    Attributes:
        collection: Logical collection the record belongs to.
        data: The document body, including the reserved fields.
        keys: Reserved field names in use by the owning store.

    Example:
        >>> rec = Record("Document", {"_id": "d1", "metadata": {"status": "draft"}})
        >>> rec.id
        'd1'
        >>> rec["metadata.status"]
        'draft'
    """

    collection: str
    data: dict[str, Any]
    keys: RecordKeys = field(default=DEFAULT_KEYS)

    @property
    def id(self) -> str:
        return self.data[self.keys.id_field]

    @property
    def created_at(self) -> datetime | None:
        return self.data.get(self.keys.created_at_field)

    @property
    def updated_at(self) -> datetime | None:
        return self.data.get(self.keys.updated_at_field)

    def resolve(self, path: FieldPath) -> Any:
        """Resolve a parsed path, returning ABSENT on a miss."""
        return path.resolve(self.data)

    def get(self, path: str, default: Any = None) -> Any:
        value = FieldPath.parse(path).resolve(self.data)
        return default if value is ABSENT else value

    def __getitem__(self, path: str) -> Any:
        value = FieldPath.parse(path).resolve(self.data)
        if value is ABSENT:
            raise KeyError(path)
        return value

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, str):
            return False
        return FieldPath.parse(path).resolve(self.data) is not ABSENT

    def __iter__(self) -> Iterator[str]:
        return iter(self.data)

    def assign(self, path: FieldPath, value: Any) -> None:
        """Write value at path, merging into nested documents."""
        assign_path(self.data, path, value)

    def touch(self, timestamp: datetime) -> None:
        """Stamp the modification time."""
        self.data[self.keys.updated_at_field] = timestamp

    def to_dict(self) -> dict[str, Any]:
        """Return a deep copy of the document body."""
        return copy.deepcopy(self.data)

    def __repr__(self) -> str:
        return f"Record({self.collection}:{self.data.get(self.keys.id_field)!r})"
