"""Custom exceptions for login-sentinel.

Provides a hierarchy of exceptions for different error types.
All login-sentinel exceptions inherit from LoginSentinelException.

None of these are allowed to escape into the authentication path:
the detector and brute-force monitor catch them at their boundary.
"""

from typing import Any, Dict, Optional


class LoginSentinelException(Exception):
    """Base exception for all login-sentinel errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional context about the error
    """

    def __init__(
        self,
        message: str,
        code: str = "SENTINEL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(LoginSentinelException):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CONFIG_ERROR", details=details)


class HistoryStoreError(LoginSentinelException):
    """Raised when the login-attempt store cannot be read or written."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="HISTORY_STORE_ERROR", details=details)


class AlertStoreError(LoginSentinelException):
    """Raised when the alert store cannot be read or written."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="ALERT_STORE_ERROR", details=details)


class LeaseError(LoginSentinelException):
    """Raised when the lease backend fails (not when a lease is busy)."""

    def __init__(
        self,
        message: str,
        lease_name: str,
        details: Optional[Dict[str, Any]] = None
    ):
        details = details or {}
        details["lease_name"] = lease_name
        super().__init__(message, code="LEASE_ERROR", details=details)
