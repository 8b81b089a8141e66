"""Login History Store - read side of the login-attempt log.

The authentication subsystem owns this log; the detection engine only
issues time-windowed queries against it. record_attempt exists for the
in-memory backend and for tooling that replays attempts.
"""

import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List

from login_sentinel.data.schemas.login_attempt import LoginAttempt


class LoginHistoryStore(ABC):
    """Abstract base class for login-attempt history backends.

    All `since` bounds are inclusive. Lists are returned newest first.
    """

    @abstractmethod
    def record_attempt(self, attempt: LoginAttempt) -> LoginAttempt:
        """Append an attempt to the log."""
        pass

    @abstractmethod
    def successful_attempts_for_user(
        self, user_id: str, since: datetime
    ) -> List[LoginAttempt]:
        """Successful attempts for a user at or after `since`.

        Raises:
            HistoryStoreError: If the backend cannot be queried
        """
        pass

    @abstractmethod
    def count_failed_attempts_by_ip(self, ip_address: str, since: datetime) -> int:
        """Number of failed attempts from an IP at or after `since`."""
        pass

    @abstractmethod
    def recent_attempts_by_ip(
        self, ip_address: str, since: datetime
    ) -> List[LoginAttempt]:
        """All attempts (any outcome) from an IP at or after `since`."""
        pass


class InMemoryLoginHistoryStore(LoginHistoryStore):
    """Thread-safe in-process history store.

    Suitable for tests, local development and single-process deployments.
    """

    def __init__(self):
        self._attempts: List[LoginAttempt] = []
        self._lock = threading.Lock()

    def record_attempt(self, attempt: LoginAttempt) -> LoginAttempt:
        with self._lock:
            self._attempts.append(attempt)
        return attempt

    def _select(self, predicate) -> List[LoginAttempt]:
        with self._lock:
            matches = [a for a in self._attempts if predicate(a)]
        return sorted(matches, key=lambda a: a.timestamp, reverse=True)

    def successful_attempts_for_user(
        self, user_id: str, since: datetime
    ) -> List[LoginAttempt]:
        return self._select(
            lambda a: a.user_id == user_id and a.is_success and a.timestamp >= since
        )

    def count_failed_attempts_by_ip(self, ip_address: str, since: datetime) -> int:
        return len(self._select(
            lambda a: a.ip_address == ip_address and not a.is_success and a.timestamp >= since
        ))

    def recent_attempts_by_ip(
        self, ip_address: str, since: datetime
    ) -> List[LoginAttempt]:
        return self._select(
            lambda a: a.ip_address == ip_address and a.timestamp >= since
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._attempts)
