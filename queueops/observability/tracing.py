"""
OpenTelemetry Tracing Setup for queue operations
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from opentelemetry import trace
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

# Global tracer instance
tracer: Optional[trace.Tracer] = None


def init_tracing(
    service_name: str = "queueops",
    enable_console_export: bool = False,
) -> trace.Tracer:
    """
    Initialize OpenTelemetry tracing

    Args:
        service_name: Name of the service for trace identification
        enable_console_export: Whether to export traces to console (dev mode)

    Returns:
        Configured Tracer instance
    """
    global tracer

    resource = Resource(attributes={SERVICE_NAME: service_name})
    provider = TracerProvider(resource=resource)

    if enable_console_export:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)
    tracer = trace.get_tracer(__name__)

    return tracer


def get_tracer() -> trace.Tracer:
    """
    Get the tracer instance

    Falls back to the global provider's tracer (a no-op tracer until
    init_tracing() is called).
    """
    if tracer is None:
        return trace.get_tracer(__name__)
    return tracer


@contextmanager
def trace_redrive_iteration(
    invocation_id: str,
    iteration: int,
    dlq_url: str,
) -> Iterator[trace.Span]:
    """
    Span covering one receive -> send -> delete iteration

    Args:
        invocation_id: Redrive invocation id
        iteration: Iteration number
        dlq_url: Source queue

    Yields:
        The active span
    """
    with get_tracer().start_as_current_span("redrive_iteration") as span:
        span.set_attribute("queueops.invocation_id", invocation_id)
        span.set_attribute("queueops.iteration", iteration)
        span.set_attribute("queueops.dlq_url", dlq_url)
        yield span
