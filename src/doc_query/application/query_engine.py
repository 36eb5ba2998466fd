"""Query engine using the Volcano iterator model.

A query is compiled into a small pull-based operator pipeline:

    Scan(collection) -> Filter(predicate) -> Sort(keys) -> Limit(skip, take)

The Volcano model:
    - Each operator is an iterator with open(), next(), close() methods
    - Operators pull records from their children on demand
    - Iterating an operator re-opens it, so a plan is a lazy, finite and
      restartable sequence; every iteration re-reads the store

Sort is the only blocking operator: it materializes its input. Filter and
Limit stream.

References:
    - Graefe, "Volcano" (1994)
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Iterator, Mapping

from doc_query.domain.entities import FilterExpression, Record, SortDirective
from doc_query.domain.services import sort_key
from doc_query.domain.value_objects import PageDirective
from doc_query.infrastructure.config import QueryConfig
from doc_query.infrastructure.logging import get_logger
from doc_query.infrastructure.tracing import trace_span
from doc_query.ports.outbound.record_store import StoreUnavailable

if TYPE_CHECKING:
    from doc_query.infrastructure.metrics import MetricsRegistry
    from doc_query.ports.outbound.record_store import RecordStore

logger = get_logger(__name__)


class Operator(ABC):
    """Base class for query operators (Volcano model)."""

    @abstractmethod
    def open(self) -> None:
        """Initialize the operator."""
        pass

    @abstractmethod
    def next(self) -> Record | None:
        """Return the next record or None if exhausted."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Clean up resources."""
        pass

    def __iter__(self) -> Iterator[Record]:
        """Allow iteration over operator results."""
        self.open()
        try:
            while True:
                record = self.next()
                if record is None:
                    break
                yield record
        finally:
            self.close()


class ScanOperator(Operator):
    """Sequential scan over one collection, in store insertion order."""

    def __init__(
        self,
        collection: str,
        store: RecordStore,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self._collection = collection
        self._store = store
        self._metrics = metrics
        self._records: list[Record] = []
        self._position = 0

    def open(self) -> None:
        self._records = list(self._store.all_of(self._collection))
        self._position = 0
        if self._metrics is not None:
            self._metrics.records_scanned_total.labels(
                collection=self._collection
            ).inc(len(self._records))

    def next(self) -> Record | None:
        if self._position >= len(self._records):
            return None
        record = self._records[self._position]
        self._position += 1
        return record

    def close(self) -> None:
        self._records = []
        self._position = 0


class FilterOperator(Operator):
    """Passes through records that satisfy every clause of the filter."""

    def __init__(self, child: Operator, predicate: FilterExpression) -> None:
        self._child = child
        self._predicate = predicate

    def open(self) -> None:
        self._child.open()

    def next(self) -> Record | None:
        while True:
            record = self._child.next()
            if record is None:
                return None
            if self._predicate.matches(record):
                return record

    def close(self) -> None:
        self._child.close()


class SortOperator(Operator):
    """Stable multi-key sort.

    Keys are applied last-to-first with stable sorts, so the first declared
    key dominates and records equal on every key keep their input order.
    """

    def __init__(self, child: Operator, directive: SortDirective) -> None:
        self._child = child
        self._directive = directive
        self._sorted: list[Record] = []
        self._position = 0

    def open(self) -> None:
        self._child.open()
        records = []
        while True:
            record = self._child.next()
            if record is None:
                break
            records.append(record)

        for key in reversed(self._directive.keys):
            path = key.path
            records.sort(
                key=lambda r: sort_key(r.resolve(path)),
                reverse=key.direction.descending,
            )

        self._sorted = records
        self._position = 0

    def next(self) -> Record | None:
        if self._position >= len(self._sorted):
            return None
        record = self._sorted[self._position]
        self._position += 1
        return record

    def close(self) -> None:
        self._child.close()
        self._sorted = []
        self._position = 0


class LimitOperator(Operator):
    """Discards the first ``skip`` records and stops after ``take``."""

    def __init__(self, child: Operator, page: PageDirective) -> None:
        self._child = child
        self._page = page
        self._returned = 0
        self._skipped = False

    def open(self) -> None:
        self._child.open()
        self._returned = 0
        self._skipped = False

    def next(self) -> Record | None:
        if not self._skipped:
            self._skipped = True
            for _ in range(self._page.skip):
                if self._child.next() is None:
                    return None

        if self._page.take is not None and self._returned >= self._page.take:
            return None
        record = self._child.next()
        if record is None:
            return None
        self._returned += 1
        return record

    def close(self) -> None:
        self._child.close()


class QueryEngine:
    """Evaluates filter/sort/page expressions against a record store.

    Expressions are parsed and validated once per call, before any record
    is read. Unknown collections and empty match sets yield an empty
    result; they are never errors.

    Example:
        engine = QueryEngine(store)
        engine.evaluate("Document", {"metadata.status": "draft"},
                        sort={"name": "ASC"}, skip=2, take=2)
    """

    def __init__(
        self,
        store: RecordStore,
        config: QueryConfig | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self._store = store
        self._config = config or QueryConfig()
        self._metrics = metrics

    @property
    def store(self) -> RecordStore:
        return self._store

    def plan(
        self,
        collection: str,
        filter: Mapping[str, Any] | FilterExpression | None = None,
        sort: Mapping[str, Any] | SortDirective | None = None,
        skip: int | None = None,
        take: int | None = None,
    ) -> Operator:
        """Build a lazy, restartable operator pipeline.

        Raises:
            InvalidExpression: If any directive is malformed.
            StoreUnavailable: If the store is not initialized.
        """
        predicate = FilterExpression.parse(filter)
        directive = SortDirective.parse(sort)
        page = PageDirective.of(skip, take).clamp(self._config.max_take)

        operator = self._matching(collection, predicate)
        if not directive.is_empty:
            operator = SortOperator(operator, directive)
        if not page.is_unbounded:
            operator = LimitOperator(operator, page)
        return operator

    def targets(
        self,
        collection: str,
        filter: Mapping[str, Any] | FilterExpression | None = None,
    ) -> list[Record]:
        """Return every record matching filter, in store order.

        This is the target set of a mutation: it is never sorted, paged or
        bounded by ``max_take``.

        Raises:
            InvalidExpression: If filter is malformed.
            StoreUnavailable: If the store is not initialized.
        """
        return list(self._matching(collection, FilterExpression.parse(filter)))

    def _matching(self, collection: str, predicate: FilterExpression) -> Operator:
        if not self._store.is_initialized:
            raise StoreUnavailable("Record store is not initialized")
        operator: Operator = ScanOperator(collection, self._store, self._metrics)
        if not predicate.is_empty:
            operator = FilterOperator(operator, predicate)
        return operator

    def evaluate(
        self,
        collection: str,
        filter: Mapping[str, Any] | FilterExpression | None = None,
        sort: Mapping[str, Any] | SortDirective | None = None,
        skip: int | None = None,
        take: int | None = None,
    ) -> list[Record]:
        """Return matching records in the requested order and page.

        Args:
            collection: Collection name; unknown names yield [].
            filter: Filter expression; None or {} matches everything.
            sort: Sort directive mapping field-path to ASC/DESC.
            skip: Leading matches to discard after sorting.
            take: Maximum matches to keep after skipping.

        Returns:
            The matching records.

        Raises:
            InvalidExpression: If any directive is malformed.
            StoreUnavailable: If the store is not initialized.
        """
        start = time.perf_counter()
        status = "error"
        with trace_span(
            "query.evaluate",
            {"collection": collection, "skip": skip, "take": take},
        ) as span:
            try:
                records = list(self.plan(collection, filter, sort, skip, take))
                status = "success"
            finally:
                elapsed = time.perf_counter() - start
                self._observe("find", status, elapsed)
            span.set_attribute("docq.matched", len(records))

        elapsed_ms = elapsed * 1000
        if elapsed_ms >= self._config.slow_query_threshold_ms:
            logger.warning(
                "slow_query",
                collection=collection,
                elapsed_ms=round(elapsed_ms, 3),
                matched=len(records),
            )
        else:
            logger.debug("query_evaluated", collection=collection, matched=len(records))
        return records

    def _observe(self, operation: str, status: str, elapsed: float) -> None:
        if self._metrics is None:
            return
        self._metrics.operations_total.labels(operation=operation, status=status).inc()
        self._metrics.operation_latency_seconds.labels(operation=operation).observe(elapsed)
