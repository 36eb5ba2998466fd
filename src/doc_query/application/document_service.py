"""Document Service - CRUD façade over the query and mutation engines.

This is the entry point test suites drive: it takes an explicitly opened
record store and offers create/find/update/delete with ODM-style query
options. Connection lifecycle stays with the caller.

Usage:
    from doc_query.adapters import InMemoryRecordStore
    from doc_query.application import DocumentService
    from doc_query.ports.inbound import QueryOptions

    with InMemoryRecordStore() as store:
        service = DocumentService(store)
        service.create("User", {"name": "Alice", "age": 31})
        adults = service.find("User", QueryOptions(where={"age": {"$gte": 18}}))
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Mapping

from doc_query.application.mutation_engine import MutationEngine
from doc_query.application.query_engine import QueryEngine
from doc_query.domain.entities import Record
from doc_query.domain.services import Clock, utc_now
from doc_query.infrastructure.config import QueryConfig
from doc_query.infrastructure.logging import get_logger
from doc_query.infrastructure.tracing import trace_span
from doc_query.ports.inbound.document_repository import QueryOptions

if TYPE_CHECKING:
    from doc_query.infrastructure.metrics import MetricsRegistry
    from doc_query.ports.outbound.record_store import RecordStore

logger = get_logger(__name__)

_ALL = QueryOptions()


class DocumentService:
    """Implementation of the DocumentRepository port.

    update() and delete() use only ``options.where``: mutations always
    target the full match set, never a sorted page of it.
    """

    def __init__(
        self,
        store: RecordStore,
        config: QueryConfig | None = None,
        clock: Clock = utc_now,
        metrics: MetricsRegistry | None = None,
        query_engine: QueryEngine | None = None,
        mutation_engine: MutationEngine | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            store: Opened record store the service reads and writes.
            config: Query configuration (page bound, slow-query threshold).
            clock: Source of modification timestamps.
            metrics: Optional metrics registry.
            query_engine: Pre-built query engine; built from store if None.
            mutation_engine: Pre-built mutation engine; built if None.
        """
        self._store = store
        self._query = query_engine or QueryEngine(store, config=config, metrics=metrics)
        self._mutation = mutation_engine or MutationEngine(
            self._query, clock=clock, metrics=metrics
        )

    @property
    def query_engine(self) -> QueryEngine:
        return self._query

    @property
    def mutation_engine(self) -> MutationEngine:
        return self._mutation

    def create(self, collection: str, data: Mapping[str, Any]) -> Record:
        record = self._store.create(collection, data)
        logger.debug("record_created", collection=collection, record_id=record.id)
        return record

    def create_many(
        self, collection: str, items: Iterable[Mapping[str, Any]]
    ) -> list[Record]:
        """Create several records; either all are stored or none are."""
        with trace_span("document.create_many", {"collection": collection}):
            with self._store.write_scope():
                records = [self._store.create(collection, item) for item in items]
        logger.debug("records_created", collection=collection, count=len(records))
        return records

    def find(self, collection: str, options: QueryOptions | None = None) -> list[Record]:
        options = options or _ALL
        return self._query.evaluate(
            collection,
            options.where,
            sort=options.order,
            skip=options.skip,
            take=options.take,
        )

    def find_one(
        self, collection: str, options: QueryOptions | None = None
    ) -> Record | None:
        results = self.find(collection, (options or _ALL).first())
        return results[0] if results else None

    def count(self, collection: str, options: QueryOptions | None = None) -> int:
        """Count matches, honoring skip/take like find() does."""
        return len(self.find(collection, options))

    def exists(self, collection: str, options: QueryOptions | None = None) -> bool:
        return self.find_one(collection, options) is not None

    def update(
        self, collection: str, options: QueryOptions, update: Mapping[str, Any]
    ) -> int:
        return self._mutation.update_many(collection, options.where, update)

    def delete(self, collection: str, options: QueryOptions) -> int:
        return self._mutation.delete_many(collection, options.where)
