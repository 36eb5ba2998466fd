"""Record Store port for keyed document storage.

This outbound port defines the contract the query and mutation engines
consume. The store owns every record; engines only hold records for the
duration of a single call.

The record store is responsible for:
- Creating records and assigning their primary keys and timestamps
- Listing a collection's records in insertion order
- Deleting records
- Providing an atomic write scope for batched mutations
"""

from __future__ import annotations

from abc import abstractmethod
from contextlib import AbstractContextManager
from typing import Any, Iterable, Mapping, Protocol, Sequence

from doc_query.domain.entities import Record, RecordKeys
from doc_query.domain.exceptions import DocQueryError


class RecordStore(Protocol):
    """Protocol for an in-process keyed object store.

    Thread Safety:
        All mutations inside one write scope must become visible together.
        Reads must never observe a half-applied write scope.
    """

    @property
    @abstractmethod
    def keys(self) -> RecordKeys:
        """Return the reserved field names this store uses."""
        ...

    @property
    @abstractmethod
    def is_initialized(self) -> bool:
        """Return True once the store is open and usable."""
        ...

    @abstractmethod
    def create(self, collection: str, obj: Mapping[str, Any]) -> Record:
        """Store a new record.

        The store assigns the primary key and both timestamps unless the
        caller supplied them.

        Args:
            collection: Target collection name.
            obj: The document body.

        Returns:
            The stored record.

        Raises:
            StoreUnavailable: If the store is not initialized.
            DuplicateRecordError: If the primary key is already taken.
        """
        ...

    @abstractmethod
    def all_of(self, collection: str) -> Sequence[Record]:
        """Return every record in a collection, in insertion order.

        Unknown collections yield an empty sequence.

        Raises:
            StoreUnavailable: If the store is not initialized.
        """
        ...

    @abstractmethod
    def delete(self, records: Iterable[Record]) -> int:
        """Remove records from the store.

        Returns:
            The number of records actually removed.

        Raises:
            StoreUnavailable: If the store is not initialized.
        """
        ...

    @abstractmethod
    def write_scope(
        self, records: Iterable[Record] = ()
    ) -> AbstractContextManager[None]:
        """Open an atomic write scope.

        Every mutation performed inside the scope is applied together, or,
        if the scope exits with an exception, none of them are. Creates and
        deletes are always covered; in-place edits to existing records are
        covered for the records passed in.

        Args:
            records: Existing records the caller will mutate in place.

        Raises:
            StoreUnavailable: If the store is not initialized.
        """
        ...


class StoreUnavailable(DocQueryError):
    """Raised when the backing store was not initialized before a call.

    Not recoverable by retrying; the store must be opened first.
    """


class DuplicateRecordError(DocQueryError):
    """Raised when creating a record whose primary key already exists."""

    def __init__(self, collection: str, record_id: str) -> None:
        super().__init__(f"Record '{record_id}' already exists in '{collection}'")
        self.collection = collection
        self.record_id = record_id
