"""Configuration management - Centralized configuration for login-sentinel.

Provides environment-aware configuration with sensible defaults.
All configuration is loaded from environment variables with fallbacks.
Detection thresholds live in DetectionConfig; this module covers the
deployment-level settings (storage backend, tables, dispatch, metrics).
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from login_sentinel.common.constants import DispatchConstants, MonitoringConstants
from login_sentinel.common.exceptions import ConfigurationError


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class StorageType(str, Enum):
    """Backends for the login-attempt store, alert store and lease table."""
    MEMORY = "memory"
    DYNAMODB = "dynamodb"


@dataclass
class Config:
    """Central configuration object for login-sentinel.

    All settings can be overridden via environment variables prefixed with SENTINEL_.

    Example:
        SENTINEL_ENVIRONMENT=production
        SENTINEL_STORAGE_TYPE=dynamodb
        SENTINEL_ALERTS_TABLE=security-alerts
    """

    # Core settings
    environment: Environment = field(
        default_factory=lambda: Environment(
            os.getenv("SENTINEL_ENVIRONMENT", "development")
        )
    )
    log_level: LogLevel = field(
        default_factory=lambda: LogLevel(os.getenv("SENTINEL_LOG_LEVEL", "INFO"))
    )

    # Storage
    storage_type: StorageType = field(
        default_factory=lambda: StorageType(
            os.getenv("SENTINEL_STORAGE_TYPE", "memory")
        )
    )
    login_attempts_table: Optional[str] = field(
        default_factory=lambda: os.getenv("SENTINEL_LOGIN_ATTEMPTS_TABLE")
    )
    alerts_table: Optional[str] = field(
        default_factory=lambda: os.getenv("SENTINEL_ALERTS_TABLE")
    )
    lease_table: Optional[str] = field(
        default_factory=lambda: os.getenv("SENTINEL_LEASE_TABLE")
    )
    aws_region: str = field(
        default_factory=lambda: os.getenv("AWS_DEFAULT_REGION", "us-east-1")
    )
    aws_profile: Optional[str] = field(
        default_factory=lambda: os.getenv("AWS_PROFILE")
    )

    # Background dispatch
    dispatch_queue_size: int = field(
        default_factory=lambda: int(
            os.getenv("SENTINEL_DISPATCH_QUEUE_SIZE", str(DispatchConstants.QUEUE_SIZE))
        )
    )
    dispatch_workers: int = field(
        default_factory=lambda: int(
            os.getenv("SENTINEL_DISPATCH_WORKERS", str(DispatchConstants.WORKERS))
        )
    )

    # Metrics
    metrics_enabled: bool = field(
        default_factory=lambda: os.getenv("SENTINEL_METRICS_ENABLED", "false").lower() == "true"
    )
    metrics_namespace: str = field(
        default_factory=lambda: os.getenv(
            "SENTINEL_METRICS_NAMESPACE", MonitoringConstants.DEFAULT_NAMESPACE
        )
    )

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.storage_type == StorageType.DYNAMODB:
            missing = [
                name for name, value in (
                    ("SENTINEL_LOGIN_ATTEMPTS_TABLE", self.login_attempts_table),
                    ("SENTINEL_ALERTS_TABLE", self.alerts_table),
                    ("SENTINEL_LEASE_TABLE", self.lease_table),
                )
                if not value
            ]
            if missing:
                raise ConfigurationError(
                    f"{', '.join(missing)} must be set when using DynamoDB storage",
                    details={"missing": missing},
                )

        if self.dispatch_queue_size <= 0:
            raise ConfigurationError("SENTINEL_DISPATCH_QUEUE_SIZE must be positive")
        if self.dispatch_workers <= 0:
            raise ConfigurationError("SENTINEL_DISPATCH_WORKERS must be positive")

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == Environment.DEVELOPMENT


# Singleton instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance.

    Returns:
        Config: The global configuration singleton.
    """
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None
