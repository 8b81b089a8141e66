"""Core types."""

from login_sentinel.core.types import (
    LoginOutcome,
    AlertType,
    AlertSeverity,
    HourStatistic,
    SEVERITY_BY_ALERT_TYPE,
)

__all__ = [
    "LoginOutcome",
    "AlertType",
    "AlertSeverity",
    "HourStatistic",
    "SEVERITY_BY_ALERT_TYPE",
]
