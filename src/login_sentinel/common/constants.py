"""Centralized constants for login-sentinel."""


# ===== DETECTION =====
class DetectionConstants:
    EARTH_RADIUS_KM = 6371.0
    HOURS_IN_DAY = 24

    IMPOSSIBLE_TRAVEL_DISTANCE_KM = 500.0
    IMPOSSIBLE_TRAVEL_WINDOW_HOURS = 1

    DEVICE_HISTORY_DAYS = 90
    LOCATION_HISTORY_DAYS = 90

    UNUSUAL_TIME_HISTORY_DAYS = 30
    UNUSUAL_TIME_MIN_SAMPLES = 10
    UNUSUAL_TIME_STD_MULTIPLIER = 2.0

    BRUTE_FORCE_WINDOW_MINUTES = 5
    BRUTE_FORCE_MAX_FAILED_ATTEMPTS = 10

    QUERY_TIMEOUT_SECONDS = 5.0
    MAX_RULE_WORKERS = 4


# ===== DISPATCH =====
class DispatchConstants:
    QUEUE_SIZE = 10000
    WORKERS = 2
    FLUSH_TIMEOUT_SECONDS = 5.0
    QUEUE_GET_TIMEOUT = 1.0


# ===== RETENTION =====
class RetentionConstants:
    RESOLVED_ALERT_RETENTION_DAYS = 90
    SWEEP_LOCK_NAME = "alert-retention-sweep"
    SWEEP_LOCK_MIN_HOLD_MINUTES = 5
    SWEEP_LOCK_MAX_HOLD_MINUTES = 30
    SWEEP_INTERVAL_HOURS = 24


# ===== STORES =====
class StoreConstants:
    DEFAULT_QUERY_LIMIT = 100
    USER_INDEX = "gsi1_pk-gsi1_sk-index"
    IP_INDEX = "gsi2_pk-gsi2_sk-index"


# ===== MONITORING =====
class MonitoringConstants:
    DEFAULT_NAMESPACE = "LoginSentinel"
    DEFAULT_BATCH_SIZE = 20
    MAX_BUFFERED_BATCHES = 10
    FLUSH_RETRY_BACKOFF_SECONDS = 30.0
