"""Monitoring module.

Provides Prometheus metrics.
"""

from surge_oracle.monitoring.metrics import (
    MetricsCollector,
    get_metrics,
    init_metrics,
)

__all__ = [
    "MetricsCollector",
    "get_metrics",
    "init_metrics",
]
