"""Data layer - schemas for login attempts and security alerts."""

from login_sentinel.data.schemas import LoginAttempt, SecurityAlert

__all__ = ["LoginAttempt", "SecurityAlert"]
