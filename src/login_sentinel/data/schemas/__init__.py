"""Data schemas - canonical Pydantic definitions."""

from login_sentinel.data.schemas.login_attempt import LoginAttempt
from login_sentinel.data.schemas.security_alert import SecurityAlert

__all__ = [
    "LoginAttempt",
    "SecurityAlert",
]
