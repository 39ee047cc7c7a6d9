"""
Prometheus metrics for the series server.

This module defines the metrics exported at ``/metrics``:
- API request rates and latencies
- Store operations by outcome
- Store size
- Process resource utilization
"""

import time
from functools import wraps
from typing import Callable

import psutil
from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    Info,
    generate_latest,
)

from series_store import __version__


# Create a custom registry for this application
metrics_registry = CollectorRegistry()


# ============================================================================
# API Metrics
# ============================================================================

api_request_counter = Counter(
    "api_requests_total",
    "Total number of API requests",
    ["method", "endpoint", "status_code"],
    registry=metrics_registry,
)

api_request_duration = Histogram(
    "api_request_duration_seconds",
    "API request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
    registry=metrics_registry,
)

# ============================================================================
# Store Metrics
# ============================================================================

store_operation_counter = Counter(
    "store_operations_total",
    "Total number of series store operations",
    ["operation", "outcome"],  # outcome: ok, not_found, conflict, invalid
    registry=metrics_registry,
)

store_operation_duration = Histogram(
    "store_operation_duration_seconds",
    "Series store operation duration in seconds",
    ["operation"],
    buckets=[0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1],
    registry=metrics_registry,
)

store_series_gauge = Gauge(
    "store_series",
    "Number of series held by the store",
    ["kind"],  # editable, revision
    registry=metrics_registry,
)

# ============================================================================
# Process Metrics
# ============================================================================

process_cpu_usage = Gauge(
    "process_cpu_usage_percent",
    "Server process CPU usage percentage",
    registry=metrics_registry,
)

process_memory_rss = Gauge(
    "process_memory_rss_bytes",
    "Server process resident memory in bytes",
    registry=metrics_registry,
)

app_info = Info(
    "app",
    "Application information",
    registry=metrics_registry,
)

app_info.info({
    "name": "Series Provider Server",
    "version": __version__,
})


# ============================================================================
# Decorators
# ============================================================================

def track_store_operation(operation: str):
    """
    Decorator recording duration of a store method.

    Args:
        operation: Operation label, e.g. ``"create_or_replace"``
    """
    def decorator(func: Callable):
        @wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                store_operation_duration.labels(operation=operation).observe(
                    time.perf_counter() - start_time
                )

        return wrapper
    return decorator


def record_store_operation(operation: str, outcome: str = "ok"):
    store_operation_counter.labels(operation=operation, outcome=outcome).inc()


# ============================================================================
# Exposition
# ============================================================================

_process = psutil.Process()


def update_process_metrics():
    """Refresh process resource gauges."""
    process_cpu_usage.set(_process.cpu_percent(interval=None))
    process_memory_rss.set(_process.memory_info().rss)


def get_metrics() -> bytes:
    """
    Get Prometheus metrics in text format.

    Returns:
        Metrics data in Prometheus text format
    """
    update_process_metrics()
    return generate_latest(metrics_registry)
