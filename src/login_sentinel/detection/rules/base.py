"""Base class for per-user detection rules."""

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import List, Optional

from login_sentinel.core.types import AlertType
from login_sentinel.data.schemas.login_attempt import LoginAttempt
from login_sentinel.data.schemas.security_alert import SecurityAlert
from login_sentinel.detection.config import DetectionConfig
from login_sentinel.stores.history import LoginHistoryStore


class DetectionRule(ABC):
    """A stateless rule evaluated against one successful login.

    Rules only read history. They return at most one alert and abstain
    (return None) when the data they need is missing.
    """

    name: str = "rule"
    alert_type: AlertType

    def __init__(self, config: Optional[DetectionConfig] = None):
        self.config = config or DetectionConfig()

    @abstractmethod
    def evaluate(
        self, attempt: LoginAttempt, history: LoginHistoryStore
    ) -> Optional[SecurityAlert]:
        """Evaluate the rule for a successful, user-bound attempt."""
        pass

    def prior_successes(
        self,
        attempt: LoginAttempt,
        history: LoginHistoryStore,
        window: timedelta,
    ) -> List[LoginAttempt]:
        """Successful logins in the window before `attempt`, newest first.

        The store usually already contains `attempt` itself, so it is
        excluded by id, as is anything recorded after it.
        """
        since = attempt.timestamp - window
        prior = [
            a for a in history.successful_attempts_for_user(attempt.user_id, since)
            if a.attempt_id != attempt.attempt_id and a.timestamp <= attempt.timestamp
        ]
        prior.sort(key=lambda a: a.timestamp, reverse=True)
        return prior

    def build_alert(self, attempt: LoginAttempt, details: str) -> SecurityAlert:
        return SecurityAlert.create(
            alert_type=self.alert_type,
            user_id=attempt.user_id,
            details=details,
            source_login_attempt_id=attempt.attempt_id,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
