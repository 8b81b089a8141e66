"""Dispatcher Configuration and Initialization.

Wires the configured stores, detector and brute-force monitor into a
running BackgroundDetectionDispatcher.
"""

import logging
from typing import Optional

from login_sentinel.common.config import Config, get_config
from login_sentinel.detection import AnomalyDetector, BruteForceMonitor, DetectionConfig
from login_sentinel.dispatch.background_dispatcher import BackgroundDetectionDispatcher
from login_sentinel.monitoring.metrics import MetricsCollector, create_metrics_collector
from login_sentinel.stores.config import create_alert_store, create_history_store

logger = logging.getLogger(__name__)


def create_dispatcher(
    config: Optional[Config] = None,
    detection_config: Optional[DetectionConfig] = None,
    metrics: Optional[MetricsCollector] = None,
) -> BackgroundDetectionDispatcher:
    """Factory method to create a dispatcher with configured backends.

    Args:
        config: Deployment settings (default: global config)
        detection_config: Thresholds (default: DetectionConfig.from_env())
        metrics: Collector to share (default: built from config, may be None)

    Returns:
        Started BackgroundDetectionDispatcher
    """
    config = config or get_config()
    detection_config = detection_config or DetectionConfig.from_env()
    metrics = metrics or create_metrics_collector(config)

    history = create_history_store(config=config)
    alerts = create_alert_store(config=config)

    detector = AnomalyDetector(history, alerts, config=detection_config, metrics=metrics)
    monitor = BruteForceMonitor(history, alerts, config=detection_config, metrics=metrics)

    logger.info(
        f"Creating detection dispatcher (storage={config.storage_type.value}, "
        f"queue={config.dispatch_queue_size}, workers={config.dispatch_workers})"
    )
    return BackgroundDetectionDispatcher(
        detector,
        brute_force_monitor=monitor,
        max_queue_size=config.dispatch_queue_size,
        num_workers=config.dispatch_workers,
        metrics=metrics,
    )
