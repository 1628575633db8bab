"""Custom metrics for the order service."""

from opentelemetry import metrics

# Get meter for order service
meter = metrics.get_meter("order-svc")

store_call_counter = meter.create_counter(
    name="order_store_calls_total",
    description="Total number of document store calls by operation",
    unit="1",
)

store_failure_counter = meter.create_counter(
    name="order_store_failures_total",
    description="Total number of failed document store calls by operation",
    unit="1",
)

store_duration_histogram = meter.create_histogram(
    name="order_store_duration_seconds",
    description="Duration of document store calls by operation",
    unit="s",
)


def record_store_call(operation: str, duration_seconds: float) -> None:
    """Record a completed store call.

    Args:
        operation: Store operation (e.g., "insert_one", "find")
        duration_seconds: Duration in seconds
    """
    store_call_counter.add(1, {"operation": operation})
    store_duration_histogram.record(duration_seconds, {"operation": operation})


def record_store_failure(operation: str, error_type: str) -> None:
    """Record a failed store call.

    Args:
        operation: Store operation that failed
        error_type: Type of error that occurred
    """
    store_failure_counter.add(1, {"operation": operation, "error_type": error_type})
