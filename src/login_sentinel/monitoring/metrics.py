"""Monitoring - track produced alerts, detection failures, dispatch drops and sweeps."""

import logging
import os
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from login_sentinel.common.config import Config, get_config
from login_sentinel.common.constants import MonitoringConstants
from login_sentinel.core.types import AlertSeverity, AlertType

logger = logging.getLogger(__name__)


class MetricType(str, Enum):
    ALERTS_PRODUCED = "AlertsProduced"
    DETECTION_FAILURES = "DetectionFailures"
    DISPATCH_DROPPED = "DispatchDropped"
    ALERTS_SWEPT = "AlertsSwept"
    SWEEP_SKIPPED = "SweepSkipped"


@dataclass
class MetricPoint:
    metric_name: str
    value: float
    unit: str = "None"
    timestamp: Optional[datetime] = None
    dimensions: Optional[Dict[str, str]] = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now(timezone.utc)


class MetricsCollector:
    """Collects and publishes metrics to CloudWatch.

    Publishing is best-effort: failures are logged and the points are
    kept for the next flush. The buffer holds at most `max_buffer_size`
    points, dropping the oldest beyond that, and automatic flushes pause
    for `retry_backoff_seconds` after a failed publish. Nothing here
    raises into the caller.
    """

    DEFAULT_REGION = "us-east-1"
    CLOUDWATCH_BATCH_LIMIT = 20

    def __init__(
        self,
        namespace: Optional[str] = None,
        region: Optional[str] = None,
        aws_profile: Optional[str] = None,
        batch_size: int = MonitoringConstants.DEFAULT_BATCH_SIZE,
        cloudwatch_client: Optional[Any] = None,
        max_buffer_size: Optional[int] = None,
        retry_backoff_seconds: float = MonitoringConstants.FLUSH_RETRY_BACKOFF_SECONDS,
    ):
        self.namespace = namespace or os.environ.get(
            "SENTINEL_METRICS_NAMESPACE", MonitoringConstants.DEFAULT_NAMESPACE
        )
        self.region = region or os.environ.get("AWS_DEFAULT_REGION", self.DEFAULT_REGION)
        self.batch_size = batch_size
        self.max_buffer_size = max_buffer_size or batch_size * MonitoringConstants.MAX_BUFFERED_BATCHES
        self.retry_backoff_seconds = retry_backoff_seconds
        self.metric_buffer: List[MetricPoint] = []
        self._buffer_lock = threading.Lock()
        self._retry_after = 0.0

        if cloudwatch_client is not None:
            self.cloudwatch = cloudwatch_client
        elif aws_profile:
            session = boto3.Session(profile_name=aws_profile)
            self.cloudwatch = session.client("cloudwatch", region_name=self.region)
        else:
            self.cloudwatch = boto3.client("cloudwatch", region_name=self.region)

        logger.info(f"Initialized MetricsCollector: namespace={self.namespace}")

    def record_metric(self, metric: MetricPoint) -> None:
        """Record a metric point, flushing when the buffer is full."""
        with self._buffer_lock:
            self.metric_buffer.append(metric)
            dropped = self._trim_buffer()
            should_flush = (
                len(self.metric_buffer) >= self.batch_size
                and time.monotonic() >= self._retry_after
            )
        if dropped:
            logger.warning(f"Metric buffer full, dropped {dropped} oldest points")
        if should_flush:
            self.flush()

    def _trim_buffer(self) -> int:
        # Caller holds _buffer_lock.
        overflow = len(self.metric_buffer) - self.max_buffer_size
        if overflow <= 0:
            return 0
        del self.metric_buffer[:overflow]
        return overflow

    def record_alert(self, alert_type: AlertType, severity: AlertSeverity) -> None:
        self.record_metric(MetricPoint(
            metric_name=MetricType.ALERTS_PRODUCED.value,
            value=1.0,
            unit="Count",
            dimensions={"AlertType": alert_type.value, "Severity": severity.value},
        ))

    def record_detection_failure(self, rule_name: str, error_type: str) -> None:
        self.record_metric(MetricPoint(
            metric_name=MetricType.DETECTION_FAILURES.value,
            value=1.0,
            unit="Count",
            dimensions={"Rule": rule_name, "ErrorType": error_type},
        ))

    def record_dispatch_dropped(self, task_kind: str) -> None:
        self.record_metric(MetricPoint(
            metric_name=MetricType.DISPATCH_DROPPED.value,
            value=1.0,
            unit="Count",
            dimensions={"Task": task_kind},
        ))

    def record_sweep(self, deleted: int, executed: bool = True) -> None:
        if not executed:
            self.record_metric(MetricPoint(
                metric_name=MetricType.SWEEP_SKIPPED.value,
                value=1.0,
                unit="Count",
            ))
            return
        self.record_metric(MetricPoint(
            metric_name=MetricType.ALERTS_SWEPT.value,
            value=float(deleted),
            unit="Count",
        ))

    def flush(self) -> None:
        """Flush buffered metrics to CloudWatch, ignoring any retry backoff."""
        with self._buffer_lock:
            pending = list(self.metric_buffer)
            self.metric_buffer.clear()
        if not pending:
            return

        metric_data = []
        for metric in pending:
            metric_dict = {
                "MetricName": metric.metric_name,
                "Value": metric.value,
                "Unit": metric.unit,
                "Timestamp": metric.timestamp,
            }
            if metric.dimensions:
                metric_dict["Dimensions"] = [
                    {"Name": k, "Value": str(v)}
                    for k, v in metric.dimensions.items()
                ]
            metric_data.append(metric_dict)

        published = 0
        try:
            for i in range(0, len(metric_data), self.CLOUDWATCH_BATCH_LIMIT):
                batch = metric_data[i:i + self.CLOUDWATCH_BATCH_LIMIT]
                self.cloudwatch.put_metric_data(
                    Namespace=self.namespace,
                    MetricData=batch,
                )
                published += len(batch)
            logger.debug(f"Published {published} metrics to CloudWatch")
            self._retry_after = 0.0
        except (ClientError, BotoCoreError) as e:
            with self._buffer_lock:
                self.metric_buffer[:0] = pending[published:]
                dropped = self._trim_buffer()
                self._retry_after = time.monotonic() + self.retry_backoff_seconds
            logger.error(
                f"Failed to publish metrics, retrying in {self.retry_backoff_seconds:g}s: {e}"
                + (f" (dropped {dropped} oldest points)" if dropped else "")
            )

    def shutdown(self) -> None:
        """Flush remaining metrics on shutdown."""
        self.flush()


def create_metrics_collector(config: Optional[Config] = None) -> Optional[MetricsCollector]:
    """Build a collector from configuration, or None when metrics are disabled."""
    config = config or get_config()
    if not config.metrics_enabled:
        return None
    return MetricsCollector(
        namespace=config.metrics_namespace,
        region=config.aws_region,
        aws_profile=config.aws_profile,
    )
