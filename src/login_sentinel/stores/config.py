"""Store Configuration and Initialization.

Factory methods that build the history store, alert store and lease
provider for the configured backend.

Environment variables (see login_sentinel.common.config.Config):
- SENTINEL_STORAGE_TYPE: "memory" (default) or "dynamodb"
- SENTINEL_LOGIN_ATTEMPTS_TABLE / SENTINEL_ALERTS_TABLE / SENTINEL_LEASE_TABLE
- AWS_DEFAULT_REGION, AWS_PROFILE
"""

import logging
from typing import Optional

from login_sentinel.common.config import Config, StorageType, get_config
from login_sentinel.retention.lease import InMemoryLeaseProvider, LeaseProvider
from login_sentinel.stores.alerts import AlertStore, InMemoryAlertStore
from login_sentinel.stores.history import InMemoryLoginHistoryStore, LoginHistoryStore

logger = logging.getLogger(__name__)


def _resolve(config: Optional[Config], storage_type: Optional[StorageType]):
    config = config or get_config()
    return config, StorageType(storage_type or config.storage_type)


def create_history_store(
    storage_type: Optional[StorageType] = None,
    config: Optional[Config] = None,
) -> LoginHistoryStore:
    """Factory method to create the login history store."""
    config, storage_type = _resolve(config, storage_type)

    if storage_type == StorageType.DYNAMODB:
        from login_sentinel.stores.dynamodb import DynamoDBLoginHistoryStore

        return DynamoDBLoginHistoryStore(
            table_name=config.login_attempts_table,
            region=config.aws_region,
            aws_profile=config.aws_profile,
        )

    logger.info("Using in-memory login history store")
    return InMemoryLoginHistoryStore()


def create_alert_store(
    storage_type: Optional[StorageType] = None,
    config: Optional[Config] = None,
) -> AlertStore:
    """Factory method to create the alert store."""
    config, storage_type = _resolve(config, storage_type)

    if storage_type == StorageType.DYNAMODB:
        from login_sentinel.stores.dynamodb import DynamoDBAlertStore

        return DynamoDBAlertStore(
            table_name=config.alerts_table,
            region=config.aws_region,
            aws_profile=config.aws_profile,
        )

    logger.info("Using in-memory alert store")
    return InMemoryAlertStore()


def create_lease_provider(
    storage_type: Optional[StorageType] = None,
    config: Optional[Config] = None,
) -> LeaseProvider:
    """Factory method to create the lease provider.

    The in-memory provider only excludes concurrent sweeps inside one
    process; use DynamoDB when running more than one instance.
    """
    config, storage_type = _resolve(config, storage_type)

    if storage_type == StorageType.DYNAMODB:
        from login_sentinel.retention.lease import DynamoDBLeaseProvider

        return DynamoDBLeaseProvider(
            table_name=config.lease_table,
            region=config.aws_region,
            aws_profile=config.aws_profile,
        )

    if config.is_production:
        logger.warning("In-memory lease provider in production: sweeps are not coordinated across instances")
    return InMemoryLeaseProvider()


__all__ = [
    "create_history_store",
    "create_alert_store",
    "create_lease_provider",
]
