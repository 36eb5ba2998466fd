"""Document Repository port - the API offered to callers.

This inbound port is the create/find/update/delete surface that test
suites and other in-process callers drive. Query options follow the
``where`` / ``order`` / ``skip`` / ``take`` shape shared by the common
ODMs.
"""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass, replace
from typing import Any, Iterable, Literal, Mapping, Protocol

from doc_query.domain.entities import Record


@dataclass(frozen=True)
class QueryOptions:
    """Filter, order and page for a find-style call.

    Attributes:
        where: Filter expression; None or empty matches every record.
        order: Sort directive mapping field-path to ASC/DESC.
        skip: Leading matches to discard.
        take: Maximum matches to keep; None for unlimited.

    Example:
        >>> QueryOptions(where={"age": {"$gte": 30}}, order={"name": "ASC"}, take=10)
    """

    where: Mapping[str, Any] | None = None
    order: Mapping[str, Literal["ASC", "DESC"] | str | int] | None = None
    skip: int | None = None
    take: int | None = None

    def first(self) -> QueryOptions:
        """Return a copy limited to a single match."""
        return replace(self, take=1)


class DocumentRepository(Protocol):
    """Protocol for document-level CRUD over named collections."""

    @abstractmethod
    def create(self, collection: str, data: Mapping[str, Any]) -> Record:
        """Store a new document and return the stored record."""
        ...

    @abstractmethod
    def create_many(
        self, collection: str, items: Iterable[Mapping[str, Any]]
    ) -> list[Record]:
        """Store several documents atomically."""
        ...

    @abstractmethod
    def find(self, collection: str, options: QueryOptions | None = None) -> list[Record]:
        """Return matching records in the requested order and page."""
        ...

    @abstractmethod
    def find_one(
        self, collection: str, options: QueryOptions | None = None
    ) -> Record | None:
        """Return the first matching record, or None."""
        ...

    @abstractmethod
    def count(self, collection: str, options: QueryOptions | None = None) -> int:
        """Return the number of matching records."""
        ...

    @abstractmethod
    def exists(self, collection: str, options: QueryOptions | None = None) -> bool:
        """Return True if at least one record matches."""
        ...

    @abstractmethod
    def update(
        self, collection: str, options: QueryOptions, update: Mapping[str, Any]
    ) -> int:
        """Apply update to every record matching options.where."""
        ...

    @abstractmethod
    def delete(self, collection: str, options: QueryOptions) -> int:
        """Remove every record matching options.where."""
        ...
