"""Tests for the background detection dispatcher."""

import os
import threading
from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest

from login_sentinel.common.config import Config
from login_sentinel.core.types import LoginOutcome
from login_sentinel.detection import DetectionConfig
from login_sentinel.dispatch import BackgroundDetectionDispatcher, create_dispatcher
from login_sentinel.stores import InMemoryLoginHistoryStore


@pytest.fixture
def detector():
    detector = MagicMock()
    detector.detect_anomalies.return_value = []
    return detector


@pytest.fixture
def monitor():
    monitor = MagicMock()
    monitor.detect_brute_force.return_value = None
    return monitor


class TestBackgroundDetectionDispatcher:
    """Tests for BackgroundDetectionDispatcher."""

    def test_routes_success_to_detector(self, detector, monitor, make_attempt, base_time):
        dispatcher = BackgroundDetectionDispatcher(detector, monitor, num_workers=1)
        attempt = make_attempt(base_time)
        detector.detect_anomalies.return_value = ["alert"]

        assert dispatcher.submit(attempt) is True
        dispatcher.flush()
        dispatcher.shutdown()

        detector.detect_anomalies.assert_called_once_with(attempt)
        monitor.detect_brute_force.assert_not_called()
        stats = dispatcher.get_stats()
        assert stats["processed"] == 1
        assert stats["alerts_raised"] == 1

    def test_routes_failure_to_brute_force_monitor(self, detector, monitor, make_attempt, base_time):
        dispatcher = BackgroundDetectionDispatcher(detector, monitor, num_workers=1)

        dispatcher.submit(make_attempt(base_time, outcome=LoginOutcome.FAILURE, ip_address="203.0.113.7"))
        dispatcher.flush()
        dispatcher.shutdown()

        monitor.detect_brute_force.assert_called_once_with("203.0.113.7")
        detector.detect_anomalies.assert_not_called()

    def test_failed_attempt_without_monitor_ignored(self, detector):
        dispatcher = BackgroundDetectionDispatcher(detector, num_workers=1)

        assert dispatcher.submit_failed_attempt("203.0.113.7") is False
        dispatcher.shutdown()

    def test_drops_when_queue_full(self, detector, make_attempt, base_time):
        started = threading.Event()
        release = threading.Event()

        def _block(attempt):
            started.set()
            release.wait(5)
            return []

        detector.detect_anomalies.side_effect = _block
        metrics = MagicMock()
        dispatcher = BackgroundDetectionDispatcher(
            detector, max_queue_size=1, num_workers=1, metrics=metrics
        )

        try:
            assert dispatcher.submit_login(make_attempt(base_time)) is True
            assert started.wait(2)
            assert dispatcher.submit_login(make_attempt(base_time + timedelta(seconds=1))) is True
            assert dispatcher.submit_login(make_attempt(base_time + timedelta(seconds=2))) is False
        finally:
            release.set()

        dispatcher.flush()
        dispatcher.shutdown()

        stats = dispatcher.get_stats()
        assert stats["submitted"] == 2
        assert stats["dropped"] == 1
        assert stats["processed"] == 2
        metrics.record_dispatch_dropped.assert_called_once_with("login")

    def test_task_failure_counted(self, detector, make_attempt, base_time):
        detector.detect_anomalies.side_effect = RuntimeError("boom")
        dispatcher = BackgroundDetectionDispatcher(detector, num_workers=1)

        dispatcher.submit_login(make_attempt(base_time))
        dispatcher.flush()
        dispatcher.shutdown()

        assert dispatcher.get_stats()["failed"] == 1

    def test_submit_after_shutdown_dropped(self, detector, make_attempt, base_time):
        dispatcher = BackgroundDetectionDispatcher(detector, num_workers=1)
        dispatcher.shutdown()

        assert dispatcher.is_running is False
        assert dispatcher.submit_login(make_attempt(base_time)) is False
        assert dispatcher.get_stats()["dropped"] == 1

    def test_shutdown_is_idempotent(self, detector):
        dispatcher = BackgroundDetectionDispatcher(detector, num_workers=2)
        dispatcher.shutdown()
        dispatcher.shutdown()

        assert dispatcher.queue_size == 0


class TestCreateDispatcher:
    """Tests for create_dispatcher wiring."""

    def test_uses_configured_sizes_and_memory_stores(self):
        with patch.dict(os.environ, {
            "SENTINEL_DISPATCH_QUEUE_SIZE": "25",
            "SENTINEL_DISPATCH_WORKERS": "3",
        }, clear=True):
            config = Config()

        dispatcher = create_dispatcher(config=config, detection_config=DetectionConfig())
        try:
            assert dispatcher.max_queue_size == 25
            assert dispatcher.num_workers == 3
            assert isinstance(dispatcher.detector.history, InMemoryLoginHistoryStore)
            assert dispatcher.brute_force_monitor.history is dispatcher.detector.history
            assert dispatcher.metrics is None
        finally:
            dispatcher.shutdown()
