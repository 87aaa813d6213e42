"""
Prometheus metrics for the media storage adapters.

Tracks:
- Storage operations per backend (count, outcome, latency)
- Thumbnail cache hits and misses
"""

import time
from typing import Callable
from functools import wraps
from prometheus_client import (
    Counter,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
)

# Create a global registry
REGISTRY = CollectorRegistry()

# ========== Counters ==========

storage_operations_total = Counter(
    "storage_operations_total",
    "Total number of media storage operations",
    ["backend", "operation", "status"],  # dropbox/local, get_files/..., success/failure
    registry=REGISTRY,
)

thumbnail_cache_requests_total = Counter(
    "thumbnail_cache_requests_total",
    "Thumbnail cache lookups",
    ["result"],  # hit/miss
    registry=REGISTRY,
)

# ========== Histograms ==========

storage_operation_duration_seconds = Histogram(
    "storage_operation_duration_seconds",
    "Time spent in a media storage operation",
    ["backend", "operation"],
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
    registry=REGISTRY,
)


# ========== Metric Decorators ==========

def track_storage_operation(operation: str):
    """
    Decorator to track duration and outcome of an adapter method.

    The backend label is read from the adapter's ``backend_name`` attribute.

    Args:
        operation: Operation name (get_files, create_file, ...)
    """
    def decorator(func: Callable):
        @wraps(func)
        def wrapper(self, *args, **kwargs):
            backend = getattr(self, "backend_name", "unknown")
            start_time = time.time()
            status = "success"
            try:
                return func(self, *args, **kwargs)
            except Exception:
                status = "failure"
                raise
            finally:
                duration = time.time() - start_time
                storage_operation_duration_seconds.labels(
                    backend=backend, operation=operation).observe(duration)
                storage_operations_total.labels(
                    backend=backend, operation=operation, status=status).inc()

        return wrapper
    return decorator


def get_metrics() -> bytes:
    """
    Get current metrics in Prometheus format.

    Returns:
        Metrics as bytes
    """
    return generate_latest(REGISTRY)


def get_metrics_content_type() -> str:
    """Get content type for metrics response."""
    return CONTENT_TYPE_LATEST
