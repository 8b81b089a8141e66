"""Logging helpers."""

from login_sentinel.common.logging.logger import PACKAGE_LOGGER, get_logger

__all__ = ["PACKAGE_LOGGER", "get_logger"]
