"""Monitoring - CloudWatch metrics."""

from login_sentinel.monitoring.metrics import (
    MetricsCollector,
    MetricPoint,
    MetricType,
    create_metrics_collector,
)

__all__ = ["MetricsCollector", "MetricPoint", "MetricType", "create_metrics_collector"]
