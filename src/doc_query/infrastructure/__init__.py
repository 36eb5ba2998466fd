"""Infrastructure layer - cross-cutting concerns."""

from doc_query.infrastructure.config import Config, get_config
from doc_query.infrastructure.container import Container
from doc_query.infrastructure.logging import get_logger, setup_logging
from doc_query.infrastructure.metrics import MetricsRegistry, get_metrics, setup_metrics
from doc_query.infrastructure.tracing import (
    get_tracer,
    setup_tracing,
    setup_tracing_from_config,
    trace_span,
)

__all__ = [
    "Config",
    "get_config",
    "Container",
    "setup_logging",
    "get_logger",
    "setup_metrics",
    "get_metrics",
    "MetricsRegistry",
    "setup_tracing",
    "setup_tracing_from_config",
    "get_tracer",
    "trace_span",
]
