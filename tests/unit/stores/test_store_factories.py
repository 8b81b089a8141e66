"""Tests for backend selection in the store factories."""

import os
from unittest.mock import patch

from login_sentinel.common.config import Config, StorageType
from login_sentinel.retention.lease import DynamoDBLeaseProvider, InMemoryLeaseProvider
from login_sentinel.stores import InMemoryAlertStore, InMemoryLoginHistoryStore
from login_sentinel.stores.config import (
    create_alert_store,
    create_history_store,
    create_lease_provider,
)
from login_sentinel.stores.dynamodb import DynamoDBAlertStore, DynamoDBLoginHistoryStore

DYNAMODB_ENV = {
    "SENTINEL_STORAGE_TYPE": "dynamodb",
    "SENTINEL_LOGIN_ATTEMPTS_TABLE": "login-attempts",
    "SENTINEL_ALERTS_TABLE": "security-alerts",
    "SENTINEL_LEASE_TABLE": "scheduler-leases",
    "AWS_DEFAULT_REGION": "me-south-1",
}


class TestStoreFactories:
    """Tests for create_* factory methods."""

    def test_memory_backends(self):
        with patch.dict(os.environ, {}, clear=True):
            config = Config()

        assert isinstance(create_history_store(config=config), InMemoryLoginHistoryStore)
        assert isinstance(create_alert_store(config=config), InMemoryAlertStore)
        assert isinstance(create_lease_provider(config=config), InMemoryLeaseProvider)

    @patch("boto3.resource")
    def test_dynamodb_backends(self, mock_resource):
        with patch.dict(os.environ, DYNAMODB_ENV, clear=True):
            config = Config()

        history = create_history_store(config=config)
        alerts = create_alert_store(config=config)
        leases = create_lease_provider(config=config)

        assert isinstance(history, DynamoDBLoginHistoryStore)
        assert isinstance(alerts, DynamoDBAlertStore)
        assert isinstance(leases, DynamoDBLeaseProvider)
        assert history.table_name == "login-attempts"
        assert alerts.table_name == "security-alerts"
        assert leases.table_name == "scheduler-leases"
        mock_resource.assert_any_call("dynamodb", region_name="me-south-1")

    def test_explicit_storage_type_overrides_config(self):
        with patch.dict(os.environ, DYNAMODB_ENV, clear=True):
            config = Config()

        store = create_alert_store(storage_type=StorageType.MEMORY, config=config)
        assert isinstance(store, InMemoryAlertStore)
