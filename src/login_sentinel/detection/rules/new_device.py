"""New device: a fingerprint not seen in the user's recent successful logins."""

from typing import Optional

from login_sentinel.core.types import AlertType
from login_sentinel.data.schemas.login_attempt import LoginAttempt
from login_sentinel.data.schemas.security_alert import SecurityAlert
from login_sentinel.detection.rules.base import DetectionRule
from login_sentinel.stores.history import LoginHistoryStore


class NewDeviceRule(DetectionRule):
    name = "new_device"
    alert_type = AlertType.NEW_DEVICE

    def evaluate(
        self, attempt: LoginAttempt, history: LoginHistoryStore
    ) -> Optional[SecurityAlert]:
        fingerprint = attempt.device_fingerprint
        if not fingerprint:
            return None

        prior = self.prior_successes(attempt, history, self.config.device_history_window)
        known = {a.device_fingerprint for a in prior if a.device_fingerprint}
        if fingerprint in known:
            return None

        details = (
            f"New device detected: {fingerprint} "
            f"(IP: {attempt.ip_address}, User-Agent: {attempt.user_agent or 'unknown'})"
        )
        return self.build_alert(attempt, details)
