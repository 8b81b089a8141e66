"""Stores - login-attempt history and security alert persistence."""

from login_sentinel.stores.history import LoginHistoryStore, InMemoryLoginHistoryStore
from login_sentinel.stores.alerts import AlertStore, InMemoryAlertStore

__all__ = [
    "LoginHistoryStore",
    "InMemoryLoginHistoryStore",
    "AlertStore",
    "InMemoryAlertStore",
]
