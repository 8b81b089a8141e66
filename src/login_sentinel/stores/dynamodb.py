"""DynamoDB-backed login history and alert stores.

Table layout (both tables):
- pk / sk: entity key
- gsi1_pk / gsi1_sk: per-user index (sk = ISO-8601 UTC timestamp)
- gsi2_pk / gsi2_sk: per-IP index (login attempts only)

Timestamps are written with fixed microsecond precision so that string
order matches time order in key conditions.
"""

import logging
import math
import os
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import ClientError

from login_sentinel.common.constants import StoreConstants
from login_sentinel.common.exceptions import AlertStoreError, HistoryStoreError
from login_sentinel.core.types import AlertType, LoginOutcome
from login_sentinel.data.schemas.login_attempt import LoginAttempt
from login_sentinel.data.schemas.security_alert import SecurityAlert
from login_sentinel.stores.alerts import AlertStore
from login_sentinel.stores.history import LoginHistoryStore

logger = logging.getLogger(__name__)


def _iso(ts: datetime) -> str:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _to_decimal(value: Optional[float]) -> Optional[Decimal]:
    if value is None or not math.isfinite(value):
        return None
    return Decimal(str(value))


def _to_float(value: Any) -> Optional[float]:
    return float(value) if value is not None else None


class _DynamoDBTable:
    """Shared boto3 table setup and paginated query helpers."""

    DEFAULT_REGION = "us-east-1"

    def __init__(
        self,
        table_name: Optional[str],
        region: Optional[str] = None,
        aws_profile: Optional[str] = None,
    ):
        if not table_name:
            raise ValueError(f"{type(self).__name__} requires a table name")
        self.table_name = table_name
        self.region = region or os.environ.get("AWS_DEFAULT_REGION", self.DEFAULT_REGION)

        if aws_profile:
            session = boto3.Session(profile_name=aws_profile)
            self.dynamodb = session.resource("dynamodb", region_name=self.region)
        else:
            self.dynamodb = boto3.resource("dynamodb", region_name=self.region)

        self.table = self.dynamodb.Table(self.table_name)
        logger.info(f"DynamoDB initialized: {self.table_name} ({self.region})")

    def _query_pages(self, **kwargs) -> List[Dict[str, Any]]:
        """Run a query or scan across all pages and return raw items."""
        items: List[Dict[str, Any]] = []
        operation = self.table.scan if kwargs.pop("_scan", False) else self.table.query
        while True:
            response = operation(**kwargs)
            items.extend(response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return items
            kwargs["ExclusiveStartKey"] = last_key

    def _count_pages(self, **kwargs) -> int:
        total = 0
        while True:
            response = self.table.query(Select="COUNT", **kwargs)
            total += int(response.get("Count", 0))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return total
            kwargs["ExclusiveStartKey"] = last_key


class DynamoDBLoginHistoryStore(_DynamoDBTable, LoginHistoryStore):
    """Login-attempt history in DynamoDB, indexed by user and by IP."""

    # ========== WRITE ==========

    def _build_item(self, attempt: LoginAttempt) -> Dict[str, Any]:
        ts = _iso(attempt.timestamp)
        item = {
            "pk": f"ATTEMPT#{attempt.attempt_id}",
            "sk": "ATTEMPT",
            "attempt_id": attempt.attempt_id,
            "timestamp": ts,
            "ip_address": attempt.ip_address,
            "user_agent": attempt.user_agent,
            "outcome": attempt.outcome.value,
            "gsi2_pk": f"IP#{attempt.ip_address}",
            "gsi2_sk": ts,
        }
        if attempt.user_id:
            item["user_id"] = attempt.user_id
            item["gsi1_pk"] = f"USER#{attempt.user_id}#{attempt.outcome.value}"
            item["gsi1_sk"] = ts
        optional = {
            "device_fingerprint": attempt.device_fingerprint,
            "country": attempt.country,
            "city": attempt.city,
            "latitude": _to_decimal(attempt.latitude),
            "longitude": _to_decimal(attempt.longitude),
        }
        item.update({k: v for k, v in optional.items() if v is not None})
        return item

    def record_attempt(self, attempt: LoginAttempt) -> LoginAttempt:
        try:
            self.table.put_item(Item=self._build_item(attempt))
            return attempt
        except ClientError as e:
            logger.error(f"record_attempt failed: {e}")
            raise HistoryStoreError(
                "Failed to record login attempt",
                details={"attempt_id": attempt.attempt_id, "error": str(e)},
            ) from e

    # ========== READ ==========

    @staticmethod
    def _item_to_attempt(item: Dict[str, Any]) -> LoginAttempt:
        return LoginAttempt(
            attempt_id=item["attempt_id"],
            user_id=item.get("user_id"),
            timestamp=datetime.fromisoformat(item["timestamp"]),
            ip_address=item["ip_address"],
            user_agent=item.get("user_agent", ""),
            device_fingerprint=item.get("device_fingerprint"),
            country=item.get("country"),
            city=item.get("city"),
            latitude=_to_float(item.get("latitude")),
            longitude=_to_float(item.get("longitude")),
            outcome=LoginOutcome(item["outcome"]),
        )

    def successful_attempts_for_user(
        self, user_id: str, since: datetime
    ) -> List[LoginAttempt]:
        try:
            items = self._query_pages(
                IndexName=StoreConstants.USER_INDEX,
                KeyConditionExpression="gsi1_pk = :pk AND gsi1_sk >= :since",
                ExpressionAttributeValues={
                    ":pk": f"USER#{user_id}#{LoginOutcome.SUCCESS.value}",
                    ":since": _iso(since),
                },
                ScanIndexForward=False,
            )
        except ClientError as e:
            logger.error(f"successful_attempts_for_user failed: {e}")
            raise HistoryStoreError(
                "Failed to query user history",
                details={"user_id": user_id, "error": str(e)},
            ) from e
        return [self._item_to_attempt(i) for i in items]

    def count_failed_attempts_by_ip(self, ip_address: str, since: datetime) -> int:
        try:
            return self._count_pages(
                IndexName=StoreConstants.IP_INDEX,
                KeyConditionExpression="gsi2_pk = :pk AND gsi2_sk >= :since",
                FilterExpression="#outcome = :failure",
                ExpressionAttributeNames={"#outcome": "outcome"},
                ExpressionAttributeValues={
                    ":pk": f"IP#{ip_address}",
                    ":since": _iso(since),
                    ":failure": LoginOutcome.FAILURE.value,
                },
            )
        except ClientError as e:
            logger.error(f"count_failed_attempts_by_ip failed: {e}")
            raise HistoryStoreError(
                "Failed to count failed attempts",
                details={"ip_address": ip_address, "error": str(e)},
            ) from e

    def recent_attempts_by_ip(
        self, ip_address: str, since: datetime
    ) -> List[LoginAttempt]:
        try:
            items = self._query_pages(
                IndexName=StoreConstants.IP_INDEX,
                KeyConditionExpression="gsi2_pk = :pk AND gsi2_sk >= :since",
                ExpressionAttributeValues={
                    ":pk": f"IP#{ip_address}",
                    ":since": _iso(since),
                },
                ScanIndexForward=False,
            )
        except ClientError as e:
            logger.error(f"recent_attempts_by_ip failed: {e}")
            raise HistoryStoreError(
                "Failed to query IP history",
                details={"ip_address": ip_address, "error": str(e)},
            ) from e
        return [self._item_to_attempt(i) for i in items]


class DynamoDBAlertStore(_DynamoDBTable, AlertStore):
    """Security alerts in DynamoDB, indexed by owning user."""

    def _build_item(self, alert: SecurityAlert) -> Dict[str, Any]:
        created = _iso(alert.created_at)
        item = {
            "pk": f"ALERT#{alert.alert_id}",
            "sk": "ALERT",
            "alert_id": alert.alert_id,
            "user_id": alert.user_id,
            "alert_type": alert.alert_type.value,
            "severity": alert.severity.value,
            "details": alert.details,
            "created_at": created,
            "resolved": alert.resolved,
            "gsi1_pk": f"USER#{alert.user_id}",
            "gsi1_sk": created,
        }
        if alert.source_login_attempt_id:
            item["source_login_attempt_id"] = alert.source_login_attempt_id
        return item

    @staticmethod
    def _item_to_alert(item: Dict[str, Any]) -> SecurityAlert:
        return SecurityAlert(
            alert_id=item["alert_id"],
            user_id=item["user_id"],
            alert_type=item["alert_type"],
            severity=item["severity"],
            details=item["details"],
            source_login_attempt_id=item.get("source_login_attempt_id"),
            created_at=datetime.fromisoformat(item["created_at"]),
            resolved=bool(item.get("resolved", False)),
        )

    def save_alert(self, alert: SecurityAlert) -> SecurityAlert:
        try:
            self.table.put_item(Item=self._build_item(alert))
            return alert
        except ClientError as e:
            logger.error(f"save_alert failed: {e}")
            raise AlertStoreError(
                "Failed to save alert",
                details={"alert_id": alert.alert_id, "error": str(e)},
            ) from e

    def delete_resolved_before(self, cutoff: datetime) -> int:
        try:
            items = self._query_pages(
                _scan=True,
                FilterExpression="#resolved = :true AND created_at < :cutoff",
                ExpressionAttributeNames={"#resolved": "resolved"},
                ExpressionAttributeValues={":true": True, ":cutoff": _iso(cutoff)},
                ProjectionExpression="pk, sk",
            )
            with self.table.batch_writer() as batch:
                for item in items:
                    batch.delete_item(Key={"pk": item["pk"], "sk": item["sk"]})
        except ClientError as e:
            logger.error(f"delete_resolved_before failed: {e}")
            raise AlertStoreError(
                "Failed to delete resolved alerts",
                details={"cutoff": _iso(cutoff), "error": str(e)},
            ) from e
        return len(items)

    def get_alerts(
        self,
        user_id: Optional[str] = None,
        alert_type: Optional[AlertType] = None,
        resolved: Optional[bool] = None,
        limit: int = StoreConstants.DEFAULT_QUERY_LIMIT,
    ) -> List[SecurityAlert]:
        filters: List[str] = []
        names: Dict[str, str] = {}
        values: Dict[str, Any] = {}
        if alert_type is not None:
            filters.append("alert_type = :alert_type")
            values[":alert_type"] = alert_type.value
        if resolved is not None:
            filters.append("#resolved = :resolved")
            names["#resolved"] = "resolved"
            values[":resolved"] = resolved

        kwargs: Dict[str, Any] = {}
        if filters:
            kwargs["FilterExpression"] = " AND ".join(filters)
        if names:
            kwargs["ExpressionAttributeNames"] = names

        try:
            if user_id is not None:
                values[":pk"] = f"USER#{user_id}"
                items = self._query_pages(
                    IndexName=StoreConstants.USER_INDEX,
                    KeyConditionExpression="gsi1_pk = :pk",
                    ExpressionAttributeValues=values,
                    ScanIndexForward=False,
                    **kwargs,
                )
            else:
                if values:
                    kwargs["ExpressionAttributeValues"] = values
                items = self._query_pages(_scan=True, **kwargs)
        except ClientError as e:
            logger.error(f"get_alerts failed: {e}")
            raise AlertStoreError(
                "Failed to query alerts",
                details={"user_id": user_id, "error": str(e)},
            ) from e

        alerts = [self._item_to_alert(i) for i in items]
        alerts.sort(key=lambda a: a.created_at, reverse=True)
        return alerts[:limit]
