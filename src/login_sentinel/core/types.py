"""Core types and enums."""

from enum import Enum
from types import MappingProxyType


class LoginOutcome(str, Enum):
    """Outcome of an authentication attempt."""
    SUCCESS = "success"
    FAILURE = "failure"


class AlertType(str, Enum):
    """Closed set of alert types produced by the detection engine."""
    IMPOSSIBLE_TRAVEL = "IMPOSSIBLE_TRAVEL"
    NEW_DEVICE = "NEW_DEVICE"
    NEW_LOCATION = "NEW_LOCATION"
    UNUSUAL_TIME = "UNUSUAL_TIME"
    BRUTE_FORCE = "BRUTE_FORCE"

    @property
    def severity(self) -> "AlertSeverity":
        """Fixed severity for this alert type."""
        return SEVERITY_BY_ALERT_TYPE[self]


class AlertSeverity(str, Enum):
    """Alert severities, lowest first."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class HourStatistic(str, Enum):
    """How the unusual-time baseline treats hour-of-day."""
    LINEAR = "linear"
    CIRCULAR = "circular"


SEVERITY_BY_ALERT_TYPE = MappingProxyType({
    AlertType.IMPOSSIBLE_TRAVEL: AlertSeverity.CRITICAL,
    AlertType.NEW_DEVICE: AlertSeverity.MEDIUM,
    AlertType.NEW_LOCATION: AlertSeverity.MEDIUM,
    AlertType.UNUSUAL_TIME: AlertSeverity.LOW,
    AlertType.BRUTE_FORCE: AlertSeverity.HIGH,
})

_unmapped = set(AlertType) - set(SEVERITY_BY_ALERT_TYPE)
if _unmapped:
    raise RuntimeError(f"Alert types without a severity: {sorted(t.value for t in _unmapped)}")
