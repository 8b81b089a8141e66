"""login-sentinel - Login anomaly detection and security alerting."""

__version__ = "0.1.0"
__author__ = "login-sentinel Team"

# Core exports
from login_sentinel.core.types import AlertSeverity, AlertType, LoginOutcome
from login_sentinel.data.schemas import LoginAttempt, SecurityAlert

__all__ = [
    "AlertSeverity",
    "AlertType",
    "LoginOutcome",
    "LoginAttempt",
    "SecurityAlert",
]
