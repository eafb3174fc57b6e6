"""
Prometheus Metrics for queue operations
"""

import structlog
from prometheus_client import Counter, Histogram, start_http_server

logger = structlog.get_logger(__name__)

# Counters
messages_processed_total = Counter(
    "queueops_messages_processed_total",
    "Messages processed by the batch consumer, by outcome",
    ["status"],
)

messages_redriven_total = Counter(
    "queueops_messages_redriven_total",
    "Messages moved from the DLQ to the main queue (sent and deleted)",
)

redrive_entry_failures_total = Counter(
    "queueops_redrive_entry_failures_total",
    "Batch entries rejected during redrive, by operation",
    ["operation"],
)

redrive_iterations_total = Counter(
    "queueops_redrive_iterations_total",
    "Non-empty receive/send/delete iterations",
)

# Histograms
redrive_iteration_duration_seconds = Histogram(
    "queueops_redrive_iteration_duration_seconds",
    "Time taken to relocate one DLQ batch",
    buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)


def start_metrics_server(port: int = 9090) -> None:
    """
    Start Prometheus metrics HTTP server

    Args:
        port: HTTP port to expose /metrics endpoint (default 9090)
    """
    start_http_server(port)
    logger.info("Prometheus metrics server started", port=port)


def increment_messages_processed(status: str, count: int = 1) -> None:
    """Increment processed messages counter"""
    messages_processed_total.labels(status=status).inc(count)


def increment_messages_redriven(count: int) -> None:
    """Increment redriven messages counter"""
    messages_redriven_total.inc(count)


def increment_entry_failures(operation: str, count: int = 1) -> None:
    """Increment rejected batch entries counter (operation: send or delete)"""
    redrive_entry_failures_total.labels(operation=operation).inc(count)


def observe_redrive_iteration(duration_seconds: float) -> None:
    """Count an iteration and observe its duration"""
    redrive_iterations_total.inc()
    redrive_iteration_duration_seconds.observe(duration_seconds)
