"""Example: End-to-end account takeover detection scenario."""

from datetime import datetime, timedelta, timezone

from login_sentinel.common.logging import get_logger
from login_sentinel.core.types import LoginOutcome
from login_sentinel.data.schemas import LoginAttempt
from login_sentinel.detection import AnomalyDetector, BruteForceMonitor
from login_sentinel.stores import InMemoryAlertStore, InMemoryLoginHistoryStore

logger = get_logger(__name__)


def example_ato_scenario():
    """
    Example scenario: Account takeover attempt.

    1. Attacker hammers the login endpoint from one IP
    2. Brute-force monitor raises a HIGH alert
    3. Attacker gets in from another city on a new device
    4. Detector raises impossible travel, new device and new location alerts
    """
    history = InMemoryLoginHistoryStore()
    alerts = InMemoryAlertStore()
    detector = AnomalyDetector(history, alerts)
    monitor = BruteForceMonitor(history, alerts)

    now = datetime.now(timezone.utc)

    # Victim's routine login from Riyadh
    history.record_attempt(LoginAttempt(
        attempt_id="att_victim",
        user_id="user_456",
        timestamp=now - timedelta(minutes=15),
        ip_address="192.168.1.100",
        user_agent="Mozilla/5.0 (Windows NT 10.0; Win64; x64)",
        device_fingerprint="fp_office_laptop",
        country="SA",
        city="Riyadh",
        latitude=24.7136,
        longitude=46.6753,
        outcome=LoginOutcome.SUCCESS,
    ))

    # Password spraying from a single IP
    for i in range(10):
        history.record_attempt(LoginAttempt(
            attempt_id=f"att_fail_{i}",
            user_id="user_456",
            timestamp=now - timedelta(seconds=60 - i * 5),
            ip_address="203.0.113.7",
            outcome=LoginOutcome.FAILURE,
        ))
    monitor.detect_brute_force("203.0.113.7", now=now)

    # Attacker succeeds from Jeddah on an unseen device
    takeover = history.record_attempt(LoginAttempt(
        attempt_id="att_takeover",
        user_id="user_456",
        timestamp=now,
        ip_address="203.0.113.7",
        user_agent="python-requests/2.31",
        device_fingerprint="fp_unknown",
        country="SA",
        city="Jeddah",
        latitude=21.4858,
        longitude=39.1925,
        outcome=LoginOutcome.SUCCESS,
    ))
    detector.detect_anomalies(takeover)

    for alert in alerts.get_alerts(user_id="user_456"):
        logger.info(f"[{alert.severity.value}] {alert.alert_type.value}: {alert.details}")

    return alerts.get_alerts(user_id="user_456")


if __name__ == "__main__":
    raised = example_ato_scenario()
    print(f"Alerts raised: {len(raised)}")
