"""Prometheus metrics definitions for Quire."""

from functools import wraps

from prometheus_client import Counter, Histogram

# Domain operations
operation_duration = Histogram(
    "quire_operation_duration_seconds",
    "Time spent in a content operation",
    ["operation"],
)

operation_errors = Counter(
    "quire_operation_errors_total",
    "Total errors by operation",
    ["operation", "error_type"],
)

# Protocol traffic
mcp_requests = Counter(
    "quire_mcp_requests_total",
    "Total MCP requests by method",
    ["method"],
)

tool_calls = Counter(
    "quire_tool_calls_total",
    "Total MCP tool calls",
    ["tool", "outcome"],  # outcome: success, error, fault
)

database_operation_duration = Histogram(
    "quire_database_operation_duration_seconds",
    "Database operation duration",
    ["operation"],
)


def track_operation(metric: Histogram, operation: str):
    """Decorator for tracking operations with metrics.

    Times the call and counts exceptions before re-raising them.

    Example:
        @track_operation(operation_duration, "create_content")
        def create_content(self, fields):
            ...
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            with metric.labels(operation=operation).time():
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    operation_errors.labels(
                        operation=operation,
                        error_type=type(e).__name__,
                    ).inc()
                    raise

        return wrapper

    return decorator
