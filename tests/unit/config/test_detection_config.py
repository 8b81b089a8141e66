"""Tests for detection thresholds and their environment overrides."""

import os
from datetime import timedelta
from unittest.mock import patch

import pytest

from login_sentinel.common.exceptions import ConfigurationError
from login_sentinel.core.types import HourStatistic
from login_sentinel.detection.config import DetectionConfig
from login_sentinel.retention.sweeper import RetentionConfig


class TestDetectionConfig:
    """Tests for DetectionConfig defaults and validation."""

    def test_defaults(self):
        config = DetectionConfig()
        assert config.impossible_travel_distance_km == 500.0
        assert config.impossible_travel_window == timedelta(hours=1)
        assert config.device_history_window == timedelta(days=90)
        assert config.location_history_window == timedelta(days=90)
        assert config.unusual_time_history_window == timedelta(days=30)
        assert config.unusual_time_min_samples == 10
        assert config.unusual_time_std_multiplier == 2.0
        assert config.hour_statistic == HourStatistic.LINEAR
        assert config.brute_force_window == timedelta(minutes=5)
        assert config.brute_force_max_failed_attempts == 10

    def test_frozen(self):
        config = DetectionConfig()
        with pytest.raises(AttributeError):
            config.unusual_time_min_samples = 3

    @pytest.mark.parametrize("overrides", [
        {"unusual_time_min_samples": 0},
        {"brute_force_max_failed_attempts": 0},
        {"query_timeout_seconds": 0},
        {"brute_force_window": timedelta(0)},
        {"device_history_window": timedelta(days=-1)},
    ])
    def test_invalid_values_rejected(self, overrides):
        with pytest.raises(ConfigurationError):
            DetectionConfig(**overrides)


class TestDetectionConfigFromEnv:
    """Tests for DetectionConfig.from_env."""

    def test_no_overrides(self):
        with patch.dict(os.environ, {}, clear=True):
            assert DetectionConfig.from_env() == DetectionConfig()

    def test_overrides(self):
        with patch.dict(os.environ, {
            "SENTINEL_IMPOSSIBLE_TRAVEL_KM": "800",
            "SENTINEL_IMPOSSIBLE_TRAVEL_WINDOW_MINUTES": "90",
            "SENTINEL_DEVICE_HISTORY_DAYS": "30",
            "SENTINEL_UNUSUAL_TIME_MIN_SAMPLES": "5",
            "SENTINEL_HOUR_STATISTIC": "CIRCULAR",
            "SENTINEL_BRUTE_FORCE_WINDOW_MINUTES": "15",
            "SENTINEL_BRUTE_FORCE_MAX_FAILED": "20",
        }, clear=True):
            config = DetectionConfig.from_env()

        assert config.impossible_travel_distance_km == 800.0
        assert config.impossible_travel_window == timedelta(minutes=90)
        assert config.device_history_window == timedelta(days=30)
        assert config.location_history_window == timedelta(days=90)
        assert config.unusual_time_min_samples == 5
        assert config.hour_statistic == HourStatistic.CIRCULAR
        assert config.brute_force_window == timedelta(minutes=15)
        assert config.brute_force_max_failed_attempts == 20

    def test_invalid_override_rejected(self):
        with patch.dict(os.environ, {"SENTINEL_BRUTE_FORCE_MAX_FAILED": "0"}, clear=True):
            with pytest.raises(ConfigurationError):
                DetectionConfig.from_env()


class TestRetentionConfig:
    """Tests for RetentionConfig."""

    def test_defaults(self):
        config = RetentionConfig()
        assert config.retention_period == timedelta(days=90)
        assert config.lock_name == "alert-retention-sweep"
        assert config.lock_min_hold < config.lock_max_hold
        assert config.sweep_interval == timedelta(hours=24)

    def test_from_env(self):
        with patch.dict(os.environ, {
            "SENTINEL_ALERT_RETENTION_DAYS": "30",
            "SENTINEL_SWEEP_INTERVAL_HOURS": "6",
        }, clear=True):
            config = RetentionConfig.from_env()
        assert config.retention_period == timedelta(days=30)
        assert config.sweep_interval == timedelta(hours=6)
