"""
Observability components.

Provides structured logging and transform metrics.
"""

from .logging import (
    ContextualLoggerAdapter,
    clear_collection_context,
    clear_correlation_id,
    get_correlation_id,
    get_logger,
    get_logging_context,
    log_operation,
    set_collection_context,
    set_correlation_id,
)
from .metrics import (
    MetricsCollector,
    TransformMetrics,
    get_metrics_collector,
    record_operation,
    timed_transform,
)

__all__ = [
    # Metrics
    "MetricsCollector",
    "TransformMetrics",
    "get_metrics_collector",
    "record_operation",
    "timed_transform",
    # Logging
    "get_correlation_id",
    "set_correlation_id",
    "clear_correlation_id",
    "set_collection_context",
    "clear_collection_context",
    "get_logging_context",
    "ContextualLoggerAdapter",
    "get_logger",
    "log_operation",
]
