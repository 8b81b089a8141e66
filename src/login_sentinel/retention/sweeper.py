"""Alert Retention Sweeper - deletes old resolved alerts.

Runs once per scheduling tick across the whole deployment: each tick
first takes a lease, and an instance that loses the race skips the tick.
"""

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from login_sentinel.common.constants import RetentionConstants
from login_sentinel.data.schemas.login_attempt import ensure_utc
from login_sentinel.monitoring.metrics import MetricsCollector
from login_sentinel.retention.lease import LeaseProvider
from login_sentinel.stores.alerts import AlertStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetentionConfig:
    retention_period: timedelta = timedelta(days=RetentionConstants.RESOLVED_ALERT_RETENTION_DAYS)
    lock_name: str = RetentionConstants.SWEEP_LOCK_NAME
    lock_min_hold: timedelta = timedelta(minutes=RetentionConstants.SWEEP_LOCK_MIN_HOLD_MINUTES)
    lock_max_hold: timedelta = timedelta(minutes=RetentionConstants.SWEEP_LOCK_MAX_HOLD_MINUTES)
    sweep_interval: timedelta = timedelta(hours=RetentionConstants.SWEEP_INTERVAL_HOURS)

    @classmethod
    def from_env(cls) -> "RetentionConfig":
        overrides = {}
        if "SENTINEL_ALERT_RETENTION_DAYS" in os.environ:
            overrides["retention_period"] = timedelta(days=int(os.environ["SENTINEL_ALERT_RETENTION_DAYS"]))
        if "SENTINEL_SWEEP_INTERVAL_HOURS" in os.environ:
            overrides["sweep_interval"] = timedelta(hours=float(os.environ["SENTINEL_SWEEP_INTERVAL_HOURS"]))
        return cls(**overrides)


@dataclass(frozen=True)
class SweepResult:
    """Outcome of one sweep tick.

    Attributes:
        executed: False when another instance held the lease
        deleted: Number of alerts deleted
        cutoff: Alerts created before this instant were eligible
        error: Error description if the deletion failed
    """
    executed: bool
    deleted: int = 0
    cutoff: Optional[datetime] = None
    error: Optional[str] = None


class AlertRetentionSweeper:
    def __init__(
        self,
        alerts: AlertStore,
        lease_provider: LeaseProvider,
        config: Optional[RetentionConfig] = None,
        metrics: Optional[MetricsCollector] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.alerts = alerts
        self.lease_provider = lease_provider
        self.config = config or RetentionConfig()
        self.metrics = metrics
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def run_once(self, now: Optional[datetime] = None) -> SweepResult:
        """Run one sweep tick. Never raises."""
        now = ensure_utc(now or self._clock())
        cfg = self.config

        try:
            with self.lease_provider.hold(cfg.lock_name, cfg.lock_min_hold, cfg.lock_max_hold) as acquired:
                if acquired:
                    return self._sweep(now - cfg.retention_period)
        except Exception as e:
            logger.warning(f"Could not acquire lease {cfg.lock_name}, skipping sweep: {e}")
        else:
            logger.info(f"Lease {cfg.lock_name} held elsewhere, skipping sweep tick")

        if self.metrics is not None:
            self.metrics.record_sweep(0, executed=False)
        return SweepResult(executed=False)

    def _sweep(self, cutoff: datetime) -> SweepResult:
        try:
            deleted = self.alerts.delete_resolved_before(cutoff)
        except Exception as e:
            logger.error(f"Alert retention sweep failed: {type(e).__name__}: {e}")
            return SweepResult(executed=True, cutoff=cutoff, error=f"{type(e).__name__}: {e}")

        logger.info(f"Alert retention sweep deleted {deleted} resolved alerts created before {cutoff.isoformat()}")
        if self.metrics is not None:
            self.metrics.record_sweep(deleted)
        return SweepResult(executed=True, deleted=deleted, cutoff=cutoff)
