"""Brute-Force Monitor - failed-attempt volume per source IP.

Keyed by IP rather than by user, and invoked independently of per-login
detection (typically on each failed attempt). Like the detector it is
best-effort: store errors and timeouts are logged and yield no alert.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable, Optional

from login_sentinel.core.types import AlertType
from login_sentinel.data.schemas.login_attempt import ensure_utc
from login_sentinel.data.schemas.security_alert import SecurityAlert
from login_sentinel.detection.config import DetectionConfig
from login_sentinel.detection.executor import call_with_timeout
from login_sentinel.monitoring.metrics import MetricsCollector
from login_sentinel.stores.alerts import AlertStore
from login_sentinel.stores.history import LoginHistoryStore

logger = logging.getLogger(__name__)

RULE_NAME = "brute_force"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BruteForceMonitor:
    """Raises a HIGH alert once an IP reaches the failed-attempt threshold."""

    def __init__(
        self,
        history: LoginHistoryStore,
        alerts: AlertStore,
        config: Optional[DetectionConfig] = None,
        metrics: Optional[MetricsCollector] = None,
        clock: Optional[Callable[[], datetime]] = None,
        executor: Optional[ThreadPoolExecutor] = None,
    ):
        self.history = history
        self.alerts = alerts
        self.config = config or DetectionConfig()
        self.metrics = metrics
        self._clock = clock or _utcnow
        self._executor = executor

    def detect_brute_force(
        self, ip_address: str, now: Optional[datetime] = None
    ) -> Optional[SecurityAlert]:
        """Check an IP for brute-force volume and persist an alert if found.

        Args:
            ip_address: Source IP to check
            now: Evaluation instant, naive values read as UTC. Uses the
                monitor's clock if not provided.

        Returns:
            The persisted alert, or None. Never raises.
        """
        try:
            return self._detect(ip_address, ensure_utc(now or self._clock()))
        except Exception as e:
            logger.error(
                f"Brute-force detection failed for IP {ip_address}: {type(e).__name__}: {e}",
                extra={"ip_address": ip_address, "rule": RULE_NAME},
            )
            if self.metrics is not None:
                self.metrics.record_detection_failure(RULE_NAME, type(e).__name__)
            return None

    def _detect(self, ip_address: str, now: datetime) -> Optional[SecurityAlert]:
        window = self.config.brute_force_window
        since = now - window
        timeout = self.config.query_timeout_seconds

        failed = call_with_timeout(
            self.history.count_failed_attempts_by_ip, ip_address, since,
            timeout=timeout, executor=self._executor,
        )
        if failed < self.config.brute_force_max_failed_attempts:
            return None

        recent = call_with_timeout(
            self.history.recent_attempts_by_ip, ip_address, since,
            timeout=timeout, executor=self._executor,
        )
        recent = [a for a in recent if a.timestamp <= now]
        recent.sort(key=lambda a: a.timestamp, reverse=True)
        source = next((a for a in recent if a.user_id), None)
        if source is None:
            logger.info(
                f"{failed} failed attempts from IP {ip_address} but no attributable user; no alert",
                extra={"ip_address": ip_address},
            )
            return None

        window_minutes = int(window.total_seconds() // 60)
        alert = SecurityAlert.create(
            alert_type=AlertType.BRUTE_FORCE,
            user_id=source.user_id,
            details=(
                f"Brute force suspected: {failed} failed login attempts from IP "
                f"{ip_address} within {window_minutes} minutes"
            ),
            source_login_attempt_id=source.attempt_id,
            created_at=now,
        )
        self.alerts.save_alert(alert)

        logger.warning(
            f"HIGH BRUTE_FORCE alert raised for IP {ip_address} (user {source.user_id})",
            extra={"ip_address": ip_address, "user_id": source.user_id, "alert_id": alert.alert_id},
        )
        if self.metrics is not None:
            self.metrics.record_alert(alert.alert_type, alert.severity)
        return alert
