"""Anomaly Detector - runs every per-user rule for one successful login.

Detection is advisory. It must never fail or hold up the authentication
flow that triggered it, so every error is terminal here:

- A rule that raises or times out is logged and skipped; the other
  rules still produce their alerts.
- An alert that cannot be persisted is logged and dropped.
- Anything else unexpected degrades to an empty result.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import List, Optional, Sequence

from login_sentinel.data.schemas.login_attempt import LoginAttempt
from login_sentinel.data.schemas.security_alert import SecurityAlert
from login_sentinel.detection.config import DetectionConfig
from login_sentinel.detection.executor import get_shared_executor
from login_sentinel.detection.rules import DetectionRule, default_rules
from login_sentinel.monitoring.metrics import MetricsCollector
from login_sentinel.stores.alerts import AlertStore
from login_sentinel.stores.history import LoginHistoryStore

logger = logging.getLogger(__name__)


@dataclass
class RuleFailure:
    """Structured error from rule evaluation."""
    rule_name: str
    error_type: str
    error_message: str


class AnomalyDetector:
    """Orchestrates the per-user rules for a successful login.

    Rules are independent, so they are submitted together to a shared
    thread pool and each is awaited with the configured query timeout.
    Alerts are persisted in rule order, not completion order.
    """

    def __init__(
        self,
        history: LoginHistoryStore,
        alerts: AlertStore,
        config: Optional[DetectionConfig] = None,
        rules: Optional[Sequence[DetectionRule]] = None,
        metrics: Optional[MetricsCollector] = None,
        executor: Optional[ThreadPoolExecutor] = None,
    ):
        """Initialize detector.

        Args:
            history: Login-attempt history to query
            alerts: Sink for produced alerts
            config: Detection thresholds. Uses defaults if not provided.
            rules: Rules to run. Uses the standard four if not provided.
            metrics: Optional metrics collector
            executor: Custom executor. Uses the shared executor if not provided.
        """
        self.history = history
        self.alerts = alerts
        self.config = config or DetectionConfig()
        self.rules: List[DetectionRule] = list(rules) if rules is not None else default_rules(self.config)
        self.metrics = metrics
        self._executor = executor

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is not None:
            return self._executor
        return get_shared_executor()

    def detect_anomalies(self, attempt: LoginAttempt) -> List[SecurityAlert]:
        """Evaluate all rules for a login and persist the resulting alerts.

        Args:
            attempt: The login attempt, already recorded in the history store

        Returns:
            The alerts that were produced and persisted. Empty for failed
            or anonymous attempts. Never raises.
        """
        if not attempt.is_success or not attempt.user_id:
            return []

        try:
            produced, failures = self._evaluate_rules(attempt)
            if failures:
                logger.warning(
                    f"Detection for attempt {attempt.attempt_id} completed with "
                    f"{len(failures)} rule failure(s): {[f.rule_name for f in failures]}",
                    extra={"user_id": attempt.user_id, "attempt_id": attempt.attempt_id},
                )
            return self._persist(attempt, produced)
        except Exception as e:
            logger.error(
                f"Anomaly detection failed for attempt {attempt.attempt_id}: {type(e).__name__}: {e}",
                extra={"user_id": attempt.user_id, "attempt_id": attempt.attempt_id},
            )
            self._record_failure("detector", type(e).__name__)
            return []

    def _evaluate_rules(self, attempt: LoginAttempt):
        executor = self._get_executor()
        futures = [
            (rule, executor.submit(rule.evaluate, attempt, self.history))
            for rule in self.rules
        ]

        produced: List[SecurityAlert] = []
        failures: List[RuleFailure] = []
        for rule, future in futures:
            try:
                alert = future.result(timeout=self.config.query_timeout_seconds)
            except FutureTimeoutError:
                future.cancel()
                failures.append(RuleFailure(rule.name, "TimeoutError", "rule evaluation timed out"))
                logger.warning(
                    f"Rule {rule.name} timed out after {self.config.query_timeout_seconds}s",
                    extra={"user_id": attempt.user_id, "rule": rule.name},
                )
                self._record_failure(rule.name, "TimeoutError")
                continue
            except Exception as e:
                failures.append(RuleFailure(rule.name, type(e).__name__, str(e)))
                logger.warning(
                    f"Rule {rule.name} failed: {type(e).__name__}: {e}",
                    extra={"user_id": attempt.user_id, "rule": rule.name},
                )
                self._record_failure(rule.name, type(e).__name__)
                continue

            if alert is not None:
                produced.append(alert)

        return produced, failures

    def _persist(self, attempt: LoginAttempt, produced: List[SecurityAlert]) -> List[SecurityAlert]:
        persisted: List[SecurityAlert] = []
        for alert in produced:
            try:
                self.alerts.save_alert(alert)
            except Exception as e:
                logger.error(
                    f"Failed to persist {alert.alert_type.value} alert: {type(e).__name__}: {e}",
                    extra={"user_id": attempt.user_id, "attempt_id": attempt.attempt_id},
                )
                self._record_failure("alert_store", type(e).__name__)
                continue

            persisted.append(alert)
            logger.info(
                f"{alert.severity.value} {alert.alert_type.value} alert raised for user {alert.user_id}",
                extra={"user_id": alert.user_id, "alert_id": alert.alert_id},
            )
            if self.metrics is not None:
                self.metrics.record_alert(alert.alert_type, alert.severity)
        return persisted

    def _record_failure(self, rule_name: str, error_type: str) -> None:
        if self.metrics is not None:
            self.metrics.record_detection_failure(rule_name, error_type)
