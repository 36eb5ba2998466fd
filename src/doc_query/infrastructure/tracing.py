"""OpenTelemetry tracing for query and mutation calls.

Until setup_tracing() installs a provider, the global OpenTelemetry API
hands out a no-op tracer, so engine spans cost almost nothing in tests and
embedded use.

Span attributes are namespaced under ``docq.`` and coerced to the primitive
types OpenTelemetry accepts.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Generator, Mapping

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

if TYPE_CHECKING:
    from doc_query.infrastructure.config import ObservabilityConfig

ATTRIBUTE_PREFIX = "docq."

_tracer: trace.Tracer | None = None


def setup_tracing(
    service_name: str = "doc_query",
    otlp_endpoint: str | None = None,
    console_export: bool = False,
) -> trace.Tracer:
    """
    Install a tracer provider and return the engine tracer.

    Args:
        service_name: Value of the ``service.name`` resource attribute
        otlp_endpoint: OTLP gRPC collector endpoint (e.g., "http://localhost:4317")
        console_export: Also print finished spans to stdout

    Returns:
        Configured tracer instance
    """
    global _tracer

    from doc_query import __version__

    provider = TracerProvider(
        resource=Resource.create(
            {"service.name": service_name, "service.version": __version__}
        )
    )
    if otlp_endpoint:
        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True))
        )
    if console_export:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)
    _tracer = trace.get_tracer(service_name)
    return _tracer


def setup_tracing_from_config(config: ObservabilityConfig) -> trace.Tracer | None:
    """Apply the tracing part of the configuration; no-op without an endpoint."""
    if not config.otel_endpoint:
        return None
    return setup_tracing(
        service_name=config.otel_service_name,
        otlp_endpoint=config.otel_endpoint,
    )


def get_tracer() -> trace.Tracer:
    """Get the engine tracer (no-op until a provider is installed)."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer("doc_query")
    return _tracer


def span_attributes(attributes: Mapping[str, Any] | None) -> dict[str, Any]:
    """Namespace keys and coerce values for Span.set_attribute.

    None values are dropped. Strings, numbers and booleans pass through;
    anything else is stored as its string form.
    """
    result: dict[str, Any] = {}
    for key, value in (attributes or {}).items():
        if value is None:
            continue
        if not isinstance(value, (str, bool, int, float)):
            value = str(value)
        name = key if key.startswith(ATTRIBUTE_PREFIX) else ATTRIBUTE_PREFIX + key
        result[name] = value
    return result


@contextmanager
def trace_span(
    name: str,
    attributes: Mapping[str, Any] | None = None,
) -> Generator[trace.Span, None, None]:
    """
    Open a span around an engine call.

    Args:
        name: Span name, e.g. "query.evaluate"
        attributes: Attributes set when the span starts

    Yields:
        The active span; further attributes may be added with
        set_attribute(), which are not namespaced automatically.
    """
    with get_tracer().start_as_current_span(
        name, attributes=span_attributes(attributes)
    ) as span:
        yield span
