"""Unit tests for the DynamoDB history and alert stores."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from login_sentinel.common.exceptions import AlertStoreError, HistoryStoreError
from login_sentinel.core.types import AlertSeverity, AlertType, LoginOutcome
from login_sentinel.data.schemas import SecurityAlert
from login_sentinel.stores.dynamodb import DynamoDBAlertStore, DynamoDBLoginHistoryStore, _iso


def _client_error(code="ProvisionedThroughputExceededException"):
    return ClientError({"Error": {"Code": code, "Message": "boom"}}, "Query")


@pytest.fixture
def mock_dynamodb_table():
    """Create mock DynamoDB table."""
    return MagicMock()


class TestIsoTimestamps:
    """Tests for the sortable timestamp encoding."""

    def test_fixed_precision(self):
        ts = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
        assert _iso(ts) == "2026-01-01T12:00:00.000000+00:00"

    def test_converted_to_utc(self):
        ts = datetime(2026, 1, 1, 15, 0, tzinfo=timezone(timedelta(hours=3)))
        assert _iso(ts) == "2026-01-01T12:00:00.000000+00:00"


class TestDynamoDBLoginHistoryStore:
    """Test DynamoDB login history store."""

    @pytest.fixture
    def store(self, mock_dynamodb_table):
        """Create history store with mocked table."""
        with patch("boto3.resource") as mock_resource:
            mock_resource.return_value.Table.return_value = mock_dynamodb_table
            store = DynamoDBLoginHistoryStore(table_name="test-login-attempts")
        store.table = mock_dynamodb_table
        return store

    def test_requires_table_name(self):
        with pytest.raises(ValueError):
            DynamoDBLoginHistoryStore(table_name=None)

    def test_record_attempt_item(self, store, mock_dynamodb_table, make_attempt, base_time):
        attempt = make_attempt(base_time)

        store.record_attempt(attempt)

        item = mock_dynamodb_table.put_item.call_args[1]["Item"]
        assert item["pk"] == f"ATTEMPT#{attempt.attempt_id}"
        assert item["gsi1_pk"] == "USER#user_001#success"
        assert item["gsi2_pk"] == "IP#10.0.0.1"
        assert item["gsi1_sk"] == item["gsi2_sk"] == _iso(base_time)
        assert item["latitude"] == Decimal("24.7136")

    def test_anonymous_attempt_has_no_user_index(self, store, mock_dynamodb_table, make_attempt, base_time):
        store.record_attempt(make_attempt(base_time, user_id=None, outcome=LoginOutcome.FAILURE, location=None))

        item = mock_dynamodb_table.put_item.call_args[1]["Item"]
        assert "gsi1_pk" not in item
        assert "user_id" not in item
        assert "latitude" not in item

    def test_record_attempt_error(self, store, mock_dynamodb_table, make_attempt, base_time):
        mock_dynamodb_table.put_item.side_effect = _client_error()

        with pytest.raises(HistoryStoreError):
            store.record_attempt(make_attempt(base_time))

    def test_successful_attempts_query(self, store, mock_dynamodb_table, base_time):
        mock_dynamodb_table.query.return_value = {
            "Items": [{
                "attempt_id": "att_1",
                "user_id": "user_001",
                "timestamp": _iso(base_time),
                "ip_address": "10.0.0.1",
                "outcome": "success",
                "country": "SA",
                "city": "Riyadh",
                "latitude": Decimal("24.7136"),
                "longitude": Decimal("46.6753"),
            }]
        }

        result = store.successful_attempts_for_user("user_001", base_time - timedelta(days=1))

        kwargs = mock_dynamodb_table.query.call_args[1]
        assert kwargs["ExpressionAttributeValues"][":pk"] == "USER#user_001#success"
        assert kwargs["ScanIndexForward"] is False
        assert len(result) == 1
        assert result[0].timestamp == base_time
        assert result[0].coordinates == (24.7136, 46.6753)

    def test_query_follows_pagination(self, store, mock_dynamodb_table, base_time):
        page = {"attempt_id": "att_1", "timestamp": _iso(base_time), "ip_address": "1.1.1.1", "outcome": "failure"}
        mock_dynamodb_table.query.side_effect = [
            {"Items": [page], "LastEvaluatedKey": {"pk": "x"}},
            {"Items": [dict(page, attempt_id="att_2")]},
        ]

        result = store.recent_attempts_by_ip("1.1.1.1", base_time)

        assert [a.attempt_id for a in result] == ["att_1", "att_2"]
        assert mock_dynamodb_table.query.call_args_list[1][1]["ExclusiveStartKey"] == {"pk": "x"}

    def test_count_failed_attempts(self, store, mock_dynamodb_table, base_time):
        mock_dynamodb_table.query.side_effect = [
            {"Count": 7, "LastEvaluatedKey": {"pk": "x"}},
            {"Count": 3},
        ]

        assert store.count_failed_attempts_by_ip("1.1.1.1", base_time) == 10
        kwargs = mock_dynamodb_table.query.call_args_list[0][1]
        assert kwargs["Select"] == "COUNT"
        assert kwargs["ExpressionAttributeValues"][":failure"] == "failure"

    def test_query_error_wrapped(self, store, mock_dynamodb_table, base_time):
        mock_dynamodb_table.query.side_effect = _client_error()

        with pytest.raises(HistoryStoreError):
            store.successful_attempts_for_user("user_001", base_time)


class TestDynamoDBAlertStore:
    """Test DynamoDB alert store."""

    @pytest.fixture
    def store(self, mock_dynamodb_table):
        with patch("boto3.resource") as mock_resource:
            mock_resource.return_value.Table.return_value = mock_dynamodb_table
            store = DynamoDBAlertStore(table_name="test-alerts")
        store.table = mock_dynamodb_table
        return store

    def test_save_alert_item(self, store, mock_dynamodb_table):
        alert = SecurityAlert.create(AlertType.BRUTE_FORCE, "user_001", "details", "att_1")

        store.save_alert(alert)

        item = mock_dynamodb_table.put_item.call_args[1]["Item"]
        assert item["pk"] == f"ALERT#{alert.alert_id}"
        assert item["severity"] == "HIGH"
        assert item["resolved"] is False
        assert item["gsi1_pk"] == "USER#user_001"
        assert item["source_login_attempt_id"] == "att_1"

    def test_save_alert_error(self, store, mock_dynamodb_table):
        mock_dynamodb_table.put_item.side_effect = _client_error()

        with pytest.raises(AlertStoreError):
            store.save_alert(SecurityAlert.create(AlertType.NEW_DEVICE, "user_001", "details"))

    def test_delete_resolved_before(self, store, mock_dynamodb_table, base_time):
        mock_dynamodb_table.scan.return_value = {
            "Items": [{"pk": "ALERT#a", "sk": "ALERT"}, {"pk": "ALERT#b", "sk": "ALERT"}]
        }
        batch = MagicMock()
        mock_dynamodb_table.batch_writer.return_value.__enter__.return_value = batch

        deleted = store.delete_resolved_before(base_time)

        assert deleted == 2
        scan_kwargs = mock_dynamodb_table.scan.call_args[1]
        assert scan_kwargs["ExpressionAttributeValues"] == {":true": True, ":cutoff": _iso(base_time)}
        batch.delete_item.assert_any_call(Key={"pk": "ALERT#a", "sk": "ALERT"})
        assert batch.delete_item.call_count == 2

    def test_get_alerts_by_user(self, store, mock_dynamodb_table, base_time):
        mock_dynamodb_table.query.return_value = {
            "Items": [{
                "alert_id": "alt_1",
                "user_id": "user_001",
                "alert_type": "IMPOSSIBLE_TRAVEL",
                "severity": "CRITICAL",
                "details": "details",
                "created_at": _iso(base_time),
                "resolved": False,
            }]
        }

        alerts = store.get_alerts(user_id="user_001", resolved=False)

        kwargs = mock_dynamodb_table.query.call_args[1]
        assert kwargs["ExpressionAttributeValues"][":pk"] == "USER#user_001"
        assert kwargs["FilterExpression"] == "#resolved = :resolved"
        assert alerts[0].severity == AlertSeverity.CRITICAL
        assert alerts[0].created_at == base_time

    def test_get_alerts_scan_without_user(self, store, mock_dynamodb_table):
        mock_dynamodb_table.scan.return_value = {"Items": []}

        assert store.get_alerts(alert_type=AlertType.NEW_DEVICE) == []
        kwargs = mock_dynamodb_table.scan.call_args[1]
        assert kwargs["ExpressionAttributeValues"] == {":alert_type": "NEW_DEVICE"}
