"""
Observability for the series server: Prometheus metrics and structured logging.
"""

from series_store.observability.metrics import (
    metrics_registry,
    api_request_counter,
    api_request_duration,
    store_operation_counter,
    store_series_gauge,
    get_metrics,
)

from series_store.observability.logging import (
    setup_logging,
    log_context,
)

__all__ = [
    # Metrics
    "metrics_registry",
    "api_request_counter",
    "api_request_duration",
    "store_operation_counter",
    "store_series_gauge",
    "get_metrics",
    # Logging
    "setup_logging",
    "log_context",
]
