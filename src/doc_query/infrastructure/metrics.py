"""Prometheus metrics for the query engine."""

from __future__ import annotations

from prometheus_client import (
    Counter,
    Histogram,
    Info,
    REGISTRY,
    CollectorRegistry,
)


class MetricsRegistry:
    """Registry of all query engine metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Operation metrics
        self.operations_total = Counter(
            "docq_operations_total",
            "Total number of engine operations",
            ["operation", "status"],  # operation: find, update, delete; status: success, error
            registry=self._registry,
        )

        self.operation_latency_seconds = Histogram(
            "docq_operation_latency_seconds",
            "Engine operation latency in seconds",
            ["operation"],
            buckets=(0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0),
            registry=self._registry,
        )

        # Scan metrics
        self.records_scanned_total = Counter(
            "docq_records_scanned_total",
            "Total records visited by collection scans",
            ["collection"],
            registry=self._registry,
        )

        # Mutation metrics
        self.records_affected_total = Counter(
            "docq_records_affected_total",
            "Total records modified or removed",
            ["operation"],  # update, delete
            registry=self._registry,
        )

        self.write_scopes_total = Counter(
            "docq_write_scopes_total",
            "Total write scopes entered",
            ["status"],  # committed, rolled_back
            registry=self._registry,
        )

        self.info = Info(
            "doc_query",
            "Query engine information",
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry


# Global metrics registry
_metrics: MetricsRegistry | None = None


def setup_metrics(registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """
    Set up the metrics registry.

    Args:
        registry: Optional custom registry

    Returns:
        The metrics registry
    """
    global _metrics
    _metrics = MetricsRegistry(registry)

    from doc_query import __version__
    _metrics.info.info({
        "version": __version__,
    })

    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
