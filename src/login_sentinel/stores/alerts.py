"""Alert Store - durable sink for security alerts.

Design principles:
- Append on detection, delete only via the retention sweep
- Query surface for the (external) triage workflow
- Thread-safe operations
"""

import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional

from login_sentinel.common.constants import StoreConstants
from login_sentinel.core.types import AlertType
from login_sentinel.data.schemas.security_alert import SecurityAlert


class AlertStore(ABC):
    """Abstract base class for alert storage backends."""

    @abstractmethod
    def save_alert(self, alert: SecurityAlert) -> SecurityAlert:
        """Persist an alert.

        Raises:
            AlertStoreError: If the write fails
        """
        pass

    @abstractmethod
    def delete_resolved_before(self, cutoff: datetime) -> int:
        """Delete resolved alerts created strictly before `cutoff`.

        Returns:
            Number of alerts deleted
        """
        pass

    @abstractmethod
    def get_alerts(
        self,
        user_id: Optional[str] = None,
        alert_type: Optional[AlertType] = None,
        resolved: Optional[bool] = None,
        limit: int = StoreConstants.DEFAULT_QUERY_LIMIT,
    ) -> List[SecurityAlert]:
        """Retrieve alerts with optional filtering, newest first."""
        pass


class InMemoryAlertStore(AlertStore):
    """Thread-safe in-process alert store."""

    def __init__(self):
        self._alerts: Dict[str, SecurityAlert] = {}
        self._lock = threading.Lock()

    def save_alert(self, alert: SecurityAlert) -> SecurityAlert:
        with self._lock:
            self._alerts[alert.alert_id] = alert
        return alert

    def delete_resolved_before(self, cutoff: datetime) -> int:
        with self._lock:
            expired = [
                alert_id for alert_id, alert in self._alerts.items()
                if alert.resolved and alert.created_at < cutoff
            ]
            for alert_id in expired:
                del self._alerts[alert_id]
        return len(expired)

    def get_alerts(
        self,
        user_id: Optional[str] = None,
        alert_type: Optional[AlertType] = None,
        resolved: Optional[bool] = None,
        limit: int = StoreConstants.DEFAULT_QUERY_LIMIT,
    ) -> List[SecurityAlert]:
        with self._lock:
            alerts = list(self._alerts.values())

        if user_id is not None:
            alerts = [a for a in alerts if a.user_id == user_id]
        if alert_type is not None:
            alerts = [a for a in alerts if a.alert_type == alert_type]
        if resolved is not None:
            alerts = [a for a in alerts if a.resolved == resolved]

        alerts.sort(key=lambda a: a.created_at, reverse=True)
        return alerts[:limit]

    def __len__(self) -> int:
        with self._lock:
            return len(self._alerts)
