"""Wiring: builds the store, engines and service from configuration.

Usage:
    container = build_container()
    service = container.resolve(DocumentService)
    ...
    container.close()   # closes the store
"""

from __future__ import annotations

from doc_query.adapters.outbound.memory_record_store import InMemoryRecordStore
from doc_query.application.document_service import DocumentService
from doc_query.application.mutation_engine import MutationEngine
from doc_query.application.query_engine import QueryEngine
from doc_query.domain.entities import RecordKeys
from doc_query.infrastructure.config import Config, get_config
from doc_query.infrastructure.container import Container
from doc_query.infrastructure.logging import get_logger, setup_logging_from_config
from doc_query.infrastructure.metrics import MetricsRegistry, get_metrics
from doc_query.infrastructure.tracing import setup_tracing_from_config

logger = get_logger(__name__)


def configure_observability(config: Config) -> None:
    """Apply logging and, when an endpoint is set, tracing configuration."""
    setup_logging_from_config(config.observability)
    setup_tracing_from_config(config.observability)


def _open_store(container: Container) -> InMemoryRecordStore:
    config = container.resolve(Config)
    store = InMemoryRecordStore(
        keys=RecordKeys(
            id_field=config.store.id_field,
            created_at_field=config.store.created_at_field,
            updated_at_field=config.store.updated_at_field,
        )
    )
    store.open()
    return store


def _metrics(container: Container) -> MetricsRegistry | None:
    if container.has(MetricsRegistry):
        return container.resolve(MetricsRegistry)
    return None


def build_container(
    config: Config | None = None,
    metrics: MetricsRegistry | None = None,
) -> Container:
    """Register every component with lazy factories.

    Args:
        config: Configuration; the cached environment config if None.
        metrics: Metrics registry; the global one if None and metrics are
            enabled in the configuration.

    Returns:
        A container whose close() shuts the store down.
    """
    config = config or get_config()
    container = Container()
    container.register_singleton(Config, config)

    if metrics is not None:
        container.register_singleton(MetricsRegistry, metrics)
    elif config.observability.metrics_enabled:
        container.register_factory(MetricsRegistry, lambda c: get_metrics())

    container.register_factory(
        InMemoryRecordStore, _open_store, finalizer=lambda store: store.close()
    )
    container.register_factory(
        QueryEngine,
        lambda c: QueryEngine(
            c.resolve(InMemoryRecordStore),
            config=c.resolve(Config).query,
            metrics=_metrics(c),
        ),
    )
    container.register_factory(
        MutationEngine,
        lambda c: MutationEngine(c.resolve(QueryEngine), metrics=_metrics(c)),
    )
    container.register_factory(
        DocumentService,
        lambda c: DocumentService(
            c.resolve(InMemoryRecordStore),
            query_engine=c.resolve(QueryEngine),
            mutation_engine=c.resolve(MutationEngine),
        ),
    )

    logger.debug("container_built", metrics_enabled=config.observability.metrics_enabled)
    return container
