"""New location: a (country, city) pair not seen in recent successful logins."""

from typing import Optional

from login_sentinel.core.types import AlertType
from login_sentinel.data.schemas.login_attempt import LoginAttempt
from login_sentinel.data.schemas.security_alert import SecurityAlert
from login_sentinel.detection.rules.base import DetectionRule
from login_sentinel.stores.history import LoginHistoryStore


class NewLocationRule(DetectionRule):
    name = "new_location"
    alert_type = AlertType.NEW_LOCATION

    def evaluate(
        self, attempt: LoginAttempt, history: LoginHistoryStore
    ) -> Optional[SecurityAlert]:
        location = attempt.location_key
        if location is None:
            return None

        prior = self.prior_successes(attempt, history, self.config.location_history_window)
        known = {a.location_key for a in prior if a.location_key is not None}
        if location in known:
            return None

        details = f"Login from new location: {attempt.location_label} (IP: {attempt.ip_address})"
        return self.build_alert(attempt, details)
