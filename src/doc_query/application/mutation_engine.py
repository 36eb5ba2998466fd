"""Mutation engine: filtered updates and deletes under a write scope.

Both operations locate their target set through QueryEngine.targets (no
sort, no page, no max_take bound), then apply every change inside a single
store write scope, so a call's changes become visible all together or
not at all.

Update semantics:
    - Single-key paths replace the field wholesale.
    - Compound paths merge into the nested document; sibling keys survive.
    - Every targeted record gets the same ``updatedAt``: the clock is read
      once per call.
    - The returned count is the size of the target set, whether or not a
      value actually changed.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Iterable, Iterator, Mapping

from doc_query.domain.entities import FilterExpression, Record, UpdateExpression
from doc_query.domain.services import Clock, utc_now
from doc_query.infrastructure.logging import get_logger
from doc_query.infrastructure.tracing import trace_span

if TYPE_CHECKING:
    from doc_query.application.query_engine import QueryEngine
    from doc_query.infrastructure.metrics import MetricsRegistry

logger = get_logger(__name__)


class MutationEngine:
    """Applies update and delete expressions to matching records."""

    def __init__(
        self,
        query_engine: QueryEngine,
        clock: Clock = utc_now,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Initialize the mutation engine.

        Args:
            query_engine: Locates target sets; its store receives the writes.
            clock: Source of modification timestamps.
            metrics: Optional metrics registry.
        """
        self._query = query_engine
        self._store = query_engine.store
        self._clock = clock
        self._metrics = metrics

    def update_many(
        self,
        collection: str,
        filter: Mapping[str, Any] | None,
        update: Mapping[str, Any],
    ) -> int:
        """Apply update to every record matching filter.

        Returns:
            Number of records in the target set.

        Raises:
            InvalidExpression: If filter or update is malformed; raised
                before any write scope is entered.
            StoreUnavailable: If the store is not initialized.
        """
        expression = UpdateExpression.parse(update, self._store.keys)
        predicate = FilterExpression.parse(filter)

        with trace_span("mutation.update_many", {"collection": collection}) as span:
            start = time.perf_counter()
            status = "error"
            try:
                targets = self._query.targets(collection, predicate)
                now = self._clock()
                with self._write_scope(targets):
                    for record in targets:
                        expression.apply(record)
                        record.touch(now)
                status = "success"
            finally:
                self._observe("update", status, time.perf_counter() - start)
            span.set_attribute("docq.affected", len(targets))

        self._count_affected("update", len(targets))
        logger.info(
            "records_updated",
            collection=collection,
            count=len(targets),
            fields=[str(a.path) for a in expression.assignments],
        )
        return len(targets)

    def delete_many(self, collection: str, filter: Mapping[str, Any] | None) -> int:
        """Remove every record matching filter.

        Returns:
            Number of records removed.

        Raises:
            InvalidExpression: If filter is malformed.
            StoreUnavailable: If the store is not initialized.
        """
        predicate = FilterExpression.parse(filter)

        with trace_span("mutation.delete_many", {"collection": collection}) as span:
            start = time.perf_counter()
            status = "error"
            try:
                targets = self._query.targets(collection, predicate)
                with self._write_scope():
                    removed = self._store.delete(targets)
                status = "success"
            finally:
                self._observe("delete", status, time.perf_counter() - start)
            span.set_attribute("docq.affected", removed)

        self._count_affected("delete", removed)
        logger.info("records_deleted", collection=collection, count=removed)
        return removed

    @contextmanager
    def _write_scope(self, records: Iterable[Record] = ()) -> Iterator[None]:
        """Enter the store's write scope and record whether it committed."""
        try:
            with self._store.write_scope(records):
                yield
        except Exception as e:
            logger.error("write_scope_failed", error=str(e))
            self._count_scope("rolled_back")
            raise
        self._count_scope("committed")

    def _count_scope(self, status: str) -> None:
        if self._metrics is not None:
            self._metrics.write_scopes_total.labels(status=status).inc()

    def _observe(self, operation: str, status: str, elapsed: float) -> None:
        if self._metrics is None:
            return
        self._metrics.operations_total.labels(operation=operation, status=status).inc()
        self._metrics.operation_latency_seconds.labels(operation=operation).observe(elapsed)

    def _count_affected(self, operation: str, count: int) -> None:
        if self._metrics is not None:
            self._metrics.records_affected_total.labels(operation=operation).inc(count)
