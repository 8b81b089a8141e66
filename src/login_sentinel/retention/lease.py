"""Leases for single-instance scheduled work.

A lease is held by at most one process at a time. It expires on its own
after `max_hold` so that a crashed holder cannot block the job forever,
and on release it stays held until `min_hold` has elapsed since
acquisition so that instances with skewed schedules do not re-run the
same tick.
"""

import logging
import os
import socket
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Iterator, Optional
from uuid import uuid4

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from login_sentinel.common.exceptions import LeaseError

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def default_holder_id() -> str:
    """Identifier for this process instance."""
    return f"{socket.gethostname()}:{os.getpid()}:{uuid4().hex[:8]}"


class LeaseProvider(ABC):
    """Abstract lease backend."""

    @abstractmethod
    def acquire(self, name: str, min_hold: timedelta, max_hold: timedelta) -> bool:
        """Try to take the named lease.

        Returns:
            True if this instance now holds the lease, False if another
            holder has it. A busy lease is not an error.

        Raises:
            LeaseError: If the backend itself fails
        """
        pass

    @abstractmethod
    def release(self, name: str) -> None:
        """Give up the lease, keeping it until its minimum hold has passed."""
        pass

    @contextmanager
    def hold(
        self, name: str, min_hold: timedelta, max_hold: timedelta
    ) -> Iterator[bool]:
        """Context manager yielding whether the lease was acquired.

        Acquisition errors propagate. A failed release is logged only, the
        lease lapses at `max_hold`.
        """
        acquired = self.acquire(name, min_hold, max_hold)
        try:
            yield acquired
        finally:
            if acquired:
                try:
                    self.release(name)
                except Exception as e:
                    logger.warning(f"Lease release failed for {name}: {type(e).__name__}: {e}")


@dataclass
class _LeaseRecord:
    holder: str
    locked_at: datetime
    lock_until: datetime
    min_hold: timedelta


class InMemoryLeaseProvider(LeaseProvider):
    """Process-local leases.

    Correct only within one process; multi-instance deployments need the
    DynamoDB provider. Several providers can share one `registry` dict to
    simulate multiple instances in tests.
    """

    def __init__(
        self,
        holder_id: Optional[str] = None,
        clock: Optional[Clock] = None,
        registry: Optional[Dict[str, _LeaseRecord]] = None,
        registry_lock: Optional[threading.Lock] = None,
    ):
        self.holder_id = holder_id or default_holder_id()
        self._clock = clock or _utcnow
        self._leases = registry if registry is not None else {}
        self._lock = registry_lock or threading.Lock()

    def acquire(self, name: str, min_hold: timedelta, max_hold: timedelta) -> bool:
        now = self._clock()
        with self._lock:
            current = self._leases.get(name)
            if current is not None and current.lock_until > now:
                return False
            self._leases[name] = _LeaseRecord(
                holder=self.holder_id,
                locked_at=now,
                lock_until=now + max_hold,
                min_hold=min_hold,
            )
            return True

    def release(self, name: str) -> None:
        now = self._clock()
        with self._lock:
            current = self._leases.get(name)
            if current is None or current.holder != self.holder_id:
                return
            current.lock_until = max(now, current.locked_at + current.min_hold)

    def is_held(self, name: str) -> bool:
        with self._lock:
            current = self._leases.get(name)
            return current is not None and current.lock_until > self._clock()


class DynamoDBLeaseProvider(LeaseProvider):
    """Leases stored in a DynamoDB table keyed by `lock_name`.

    Acquisition is a conditional put that only succeeds when no lease
    exists or the existing one has expired. Times are epoch milliseconds.
    """

    DEFAULT_REGION = "us-east-1"

    def __init__(
        self,
        table_name: Optional[str] = None,
        region: Optional[str] = None,
        aws_profile: Optional[str] = None,
        holder_id: Optional[str] = None,
        clock: Optional[Clock] = None,
    ):
        self.table_name = table_name or os.environ.get("SENTINEL_LEASE_TABLE")
        if not self.table_name:
            raise ValueError("SENTINEL_LEASE_TABLE required")

        self.region = region or os.environ.get("AWS_DEFAULT_REGION", self.DEFAULT_REGION)
        self.holder_id = holder_id or default_holder_id()
        self._clock = clock or _utcnow
        self._locked_at: Dict[str, datetime] = {}
        self._min_hold: Dict[str, timedelta] = {}

        if aws_profile:
            session = boto3.Session(profile_name=aws_profile)
            self.dynamodb = session.resource("dynamodb", region_name=self.region)
        else:
            self.dynamodb = boto3.resource("dynamodb", region_name=self.region)

        self.table = self.dynamodb.Table(self.table_name)
        logger.info(f"DynamoDB lease table initialized: {self.table_name} ({self.region})")

    @staticmethod
    def _millis(ts: datetime) -> int:
        return int(ts.timestamp() * 1000)

    def acquire(self, name: str, min_hold: timedelta, max_hold: timedelta) -> bool:
        now = self._clock()
        try:
            self.table.put_item(
                Item={
                    "lock_name": name,
                    "locked_by": self.holder_id,
                    "locked_at": self._millis(now),
                    "lock_until": self._millis(now + max_hold),
                },
                ConditionExpression="attribute_not_exists(lock_name) OR lock_until <= :now",
                ExpressionAttributeValues={":now": self._millis(now)},
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                return False
            logger.error(f"Lease acquire failed for {name}: {e}")
            raise LeaseError("Failed to acquire lease", lease_name=name, details={"error": str(e)}) from e

        self._locked_at[name] = now
        self._min_hold[name] = min_hold
        return True

    def release(self, name: str) -> None:
        locked_at = self._locked_at.pop(name, None)
        min_hold = self._min_hold.pop(name, timedelta(0))
        if locked_at is None:
            return

        until = max(self._clock(), locked_at + min_hold)
        try:
            self.table.update_item(
                Key={"lock_name": name},
                UpdateExpression="SET lock_until = :until",
                ConditionExpression="locked_by = :me",
                ExpressionAttributeValues={
                    ":until": self._millis(until),
                    ":me": self.holder_id,
                },
            )
        except (ClientError, BotoCoreError) as e:
            # The lease still expires at max_hold on its own.
            logger.warning(f"Lease release failed for {name}: {e}")
