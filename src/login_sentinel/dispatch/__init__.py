"""Asynchronous dispatch of detection work."""

from login_sentinel.dispatch.background_dispatcher import BackgroundDetectionDispatcher
from login_sentinel.dispatch.config import create_dispatcher

__all__ = ["BackgroundDetectionDispatcher", "create_dispatcher"]
