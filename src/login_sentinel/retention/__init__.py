"""Alert retention - scheduled, lease-guarded deletion of resolved alerts."""

from login_sentinel.retention.lease import (
    LeaseProvider,
    InMemoryLeaseProvider,
    DynamoDBLeaseProvider,
)
from login_sentinel.retention.sweeper import AlertRetentionSweeper, RetentionConfig, SweepResult
from login_sentinel.retention.scheduler import SweepScheduler

__all__ = [
    "LeaseProvider",
    "InMemoryLeaseProvider",
    "DynamoDBLeaseProvider",
    "AlertRetentionSweeper",
    "RetentionConfig",
    "SweepResult",
    "SweepScheduler",
]
