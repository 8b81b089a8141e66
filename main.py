#!/usr/bin/env python3
"""Main entry point for login-sentinel."""

import argparse

from login_sentinel.common.logging import PACKAGE_LOGGER, get_logger
from login_sentinel.common.config import get_config
from login_sentinel.monitoring import create_metrics_collector
from login_sentinel.retention import AlertRetentionSweeper, RetentionConfig
from login_sentinel.stores.config import create_alert_store, create_lease_provider

logger = get_logger(__name__)


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(description="login-sentinel")
    parser.add_argument(
        "--sweep",
        action="store_true",
        help="Run one alert retention sweep and exit",
    )
    args = parser.parse_args(argv)

    config = get_config()
    logger.setLevel(config.log_level.value)
    get_logger(PACKAGE_LOGGER, config.log_level.value)
    logger.info(f"login-sentinel initialized in {config.environment.value} mode")
    logger.info(f"Storage backend: {config.storage_type.value}")

    if args.sweep:
        metrics = create_metrics_collector(config)
        sweeper = AlertRetentionSweeper(
            alerts=create_alert_store(config=config),
            lease_provider=create_lease_provider(config=config),
            config=RetentionConfig.from_env(),
            metrics=metrics,
        )
        result = sweeper.run_once()
        if metrics is not None:
            metrics.shutdown()
        logger.info(
            f"Sweep finished: executed={result.executed}, deleted={result.deleted}"
            + (f", error={result.error}" if result.error else "")
        )
        return 1 if result.error else 0
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
