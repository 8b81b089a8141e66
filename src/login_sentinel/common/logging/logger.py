"""Centralized logging configuration.

Modules log through `logging.getLogger(__name__)`. Calling `get_logger`
on the package name once attaches the shared handler that those module
loggers propagate to.
"""

import logging
import os
from typing import Optional

PACKAGE_LOGGER = "login_sentinel"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Get a configured logger instance.

    Args:
        name: Logger name
        level: Level name. Falls back to SENTINEL_LOG_LEVEL, then INFO.
    """
    logger = logging.getLogger(name)
    level = (level or os.getenv("SENTINEL_LOG_LEVEL", "INFO")).upper()
    logger.setLevel(getattr(logging, level))

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    return logger
