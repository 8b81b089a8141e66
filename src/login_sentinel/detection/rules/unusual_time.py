"""Unusual time: login hour far from the user's historical baseline."""

from typing import Optional

from login_sentinel.core.types import AlertType
from login_sentinel.data.schemas.login_attempt import LoginAttempt
from login_sentinel.data.schemas.security_alert import SecurityAlert
from login_sentinel.detection.baseline import compute_hour_baseline, utc_hour
from login_sentinel.detection.rules.base import DetectionRule
from login_sentinel.stores.history import LoginHistoryStore


class UnusualTimeRule(DetectionRule):
    """Flags a login whose UTC hour deviates from the baseline mean by
    more than `unusual_time_std_multiplier` standard deviations.

    With a zero standard deviation any non-zero deviation is unusual.
    """

    name = "unusual_time"
    alert_type = AlertType.UNUSUAL_TIME

    def evaluate(
        self, attempt: LoginAttempt, history: LoginHistoryStore
    ) -> Optional[SecurityAlert]:
        prior = self.prior_successes(attempt, history, self.config.unusual_time_history_window)
        baseline = compute_hour_baseline(
            (a.timestamp for a in prior),
            min_samples=self.config.unusual_time_min_samples,
            method=self.config.hour_statistic,
        )
        if baseline is None:
            return None

        hour = utc_hour(attempt.timestamp)
        if not baseline.is_unusual(hour, self.config.unusual_time_std_multiplier):
            return None

        details = (
            f"Unusual login time: {hour:02d}:00 UTC "
            f"(baseline mean {baseline.mean:.1f}h, std dev {baseline.std_dev:.1f}h)"
        )
        return self.build_alert(attempt, details)
