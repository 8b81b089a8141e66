"""Impossible travel: two successful logins too far apart to be one traveller."""

from typing import Optional

from login_sentinel.core.types import AlertType
from login_sentinel.data.schemas.login_attempt import LoginAttempt
from login_sentinel.data.schemas.security_alert import SecurityAlert
from login_sentinel.detection.geo import distance_between
from login_sentinel.detection.rules.base import DetectionRule
from login_sentinel.stores.history import LoginHistoryStore


class ImpossibleTravelRule(DetectionRule):
    """Compares the current login with the most recent prior success.

    Only the single most recent prior login within the window is
    considered. If it has no usable coordinates the rule abstains rather
    than searching further back.
    """

    name = "impossible_travel"
    alert_type = AlertType.IMPOSSIBLE_TRAVEL

    def evaluate(
        self, attempt: LoginAttempt, history: LoginHistoryStore
    ) -> Optional[SecurityAlert]:
        current = attempt.coordinates
        if current is None:
            return None

        prior = self.prior_successes(attempt, history, self.config.impossible_travel_window)
        if not prior:
            return None

        previous = prior[0]
        previous_coords = previous.coordinates
        if previous_coords is None:
            return None

        distance_km = distance_between(previous_coords, current)
        if distance_km <= self.config.impossible_travel_distance_km:
            return None

        elapsed_minutes = int((attempt.timestamp - previous.timestamp).total_seconds() // 60)
        details = (
            f"Impossible travel detected: {distance_km:.0f} km from "
            f"{previous.location_label} to {attempt.location_label} "
            f"in {elapsed_minutes} minutes"
        )
        return self.build_alert(attempt, details)
