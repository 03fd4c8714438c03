"""OpenTelemetry tracing configuration."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Generator

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

SPAN_PREFIX = "qat."

_tracer: trace.Tracer | None = None


def setup_tracing(
    service_name: str = "qat_device_plugin",
    otlp_endpoint: str | None = None,
    environment: str = "development",
) -> trace.Tracer:
    """Set up OpenTelemetry tracing."""
    global _tracer

    from qat_plugin import __version__

    resource = Resource.create(
        {
            "service.name": service_name,
            "service.version": __version__,
            "deployment.environment": environment,
        }
    )
    provider = TracerProvider(resource=resource)

    if otlp_endpoint:
        otlp_exporter = OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True)
        provider.add_span_processor(BatchSpanProcessor(otlp_exporter))

    trace.set_tracer_provider(provider)
    _tracer = trace.get_tracer(service_name)
    return _tracer


def get_tracer() -> trace.Tracer:
    """Get the global tracer instance."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer("qat_device_plugin")
    return _tracer


@contextmanager
def trace_span(name: str, **attributes: Any) -> Generator[trace.Span, None, None]:
    """Open a span named `qat.<name>`.

    Attribute keys get the same `qat.` prefix.
    """
    with get_tracer().start_as_current_span(SPAN_PREFIX + name) as span:
        for key, value in attributes.items():
            span.set_attribute(SPAN_PREFIX + key, value)
        yield span
