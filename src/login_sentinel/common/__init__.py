"""Common utilities - logging, config, exceptions."""

from login_sentinel.common.logging.logger import get_logger
from login_sentinel.common.config import Config, get_config, reset_config
from login_sentinel.common.exceptions import (
    LoginSentinelException,
    ConfigurationError,
    HistoryStoreError,
    AlertStoreError,
    LeaseError,
)

__all__ = [
    # Logging
    "get_logger",
    # Config
    "Config",
    "get_config",
    "reset_config",
    # Exceptions
    "LoginSentinelException",
    "ConfigurationError",
    "HistoryStoreError",
    "AlertStoreError",
    "LeaseError",
]
