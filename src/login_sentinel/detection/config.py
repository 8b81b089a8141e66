"""Configuration for the detection rules.

Centralizes thresholds and windows so they can be tuned or overridden
in one place and injected into the detector and brute-force monitor.
"""
import os
from dataclasses import dataclass, fields
from datetime import timedelta

from login_sentinel.common.constants import DetectionConstants
from login_sentinel.common.exceptions import ConfigurationError
from login_sentinel.core.types import HourStatistic


@dataclass(frozen=True)
class DetectionConfig:
    # Impossible travel
    impossible_travel_distance_km: float = DetectionConstants.IMPOSSIBLE_TRAVEL_DISTANCE_KM
    impossible_travel_window: timedelta = timedelta(hours=DetectionConstants.IMPOSSIBLE_TRAVEL_WINDOW_HOURS)

    # New device / new location
    device_history_window: timedelta = timedelta(days=DetectionConstants.DEVICE_HISTORY_DAYS)
    location_history_window: timedelta = timedelta(days=DetectionConstants.LOCATION_HISTORY_DAYS)

    # Unusual time
    unusual_time_history_window: timedelta = timedelta(days=DetectionConstants.UNUSUAL_TIME_HISTORY_DAYS)
    unusual_time_min_samples: int = DetectionConstants.UNUSUAL_TIME_MIN_SAMPLES
    unusual_time_std_multiplier: float = DetectionConstants.UNUSUAL_TIME_STD_MULTIPLIER
    hour_statistic: HourStatistic = HourStatistic.LINEAR

    # Brute force
    brute_force_window: timedelta = timedelta(minutes=DetectionConstants.BRUTE_FORCE_WINDOW_MINUTES)
    brute_force_max_failed_attempts: int = DetectionConstants.BRUTE_FORCE_MAX_FAILED_ATTEMPTS

    # History queries
    query_timeout_seconds: float = DetectionConstants.QUERY_TIMEOUT_SECONDS

    def __post_init__(self):
        if self.unusual_time_min_samples < 1:
            raise ConfigurationError("unusual_time_min_samples must be at least 1")
        if self.brute_force_max_failed_attempts < 1:
            raise ConfigurationError("brute_force_max_failed_attempts must be at least 1")
        if self.query_timeout_seconds <= 0:
            raise ConfigurationError("query_timeout_seconds must be positive")
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, timedelta) and value <= timedelta(0):
                raise ConfigurationError(f"{f.name} must be a positive duration")

    @classmethod
    def from_env(cls) -> "DetectionConfig":
        """Build a config, applying SENTINEL_* environment overrides.

        Durations are read in their natural unit: minutes for the travel and
        brute-force windows, days for the history windows.
        """
        env = os.environ
        overrides = {}
        if "SENTINEL_IMPOSSIBLE_TRAVEL_KM" in env:
            overrides["impossible_travel_distance_km"] = float(env["SENTINEL_IMPOSSIBLE_TRAVEL_KM"])
        if "SENTINEL_IMPOSSIBLE_TRAVEL_WINDOW_MINUTES" in env:
            overrides["impossible_travel_window"] = timedelta(
                minutes=int(env["SENTINEL_IMPOSSIBLE_TRAVEL_WINDOW_MINUTES"])
            )
        if "SENTINEL_DEVICE_HISTORY_DAYS" in env:
            overrides["device_history_window"] = timedelta(days=int(env["SENTINEL_DEVICE_HISTORY_DAYS"]))
        if "SENTINEL_LOCATION_HISTORY_DAYS" in env:
            overrides["location_history_window"] = timedelta(days=int(env["SENTINEL_LOCATION_HISTORY_DAYS"]))
        if "SENTINEL_UNUSUAL_TIME_HISTORY_DAYS" in env:
            overrides["unusual_time_history_window"] = timedelta(
                days=int(env["SENTINEL_UNUSUAL_TIME_HISTORY_DAYS"])
            )
        if "SENTINEL_UNUSUAL_TIME_MIN_SAMPLES" in env:
            overrides["unusual_time_min_samples"] = int(env["SENTINEL_UNUSUAL_TIME_MIN_SAMPLES"])
        if "SENTINEL_UNUSUAL_TIME_STD_MULTIPLIER" in env:
            overrides["unusual_time_std_multiplier"] = float(env["SENTINEL_UNUSUAL_TIME_STD_MULTIPLIER"])
        if "SENTINEL_HOUR_STATISTIC" in env:
            overrides["hour_statistic"] = HourStatistic(env["SENTINEL_HOUR_STATISTIC"].lower())
        if "SENTINEL_BRUTE_FORCE_WINDOW_MINUTES" in env:
            overrides["brute_force_window"] = timedelta(minutes=int(env["SENTINEL_BRUTE_FORCE_WINDOW_MINUTES"]))
        if "SENTINEL_BRUTE_FORCE_MAX_FAILED" in env:
            overrides["brute_force_max_failed_attempts"] = int(env["SENTINEL_BRUTE_FORCE_MAX_FAILED"])
        if "SENTINEL_QUERY_TIMEOUT_SECONDS" in env:
            overrides["query_timeout_seconds"] = float(env["SENTINEL_QUERY_TIMEOUT_SECONDS"])
        return cls(**overrides)
