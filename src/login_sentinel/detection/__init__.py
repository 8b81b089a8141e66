"""Login anomaly detection.

Rule-based detection over a user's recent successful logins, plus an
IP-keyed brute-force monitor. Produces classified SecurityAlerts; never
decides whether a login is allowed.
"""

from login_sentinel.detection.config import DetectionConfig
from login_sentinel.detection.geo import haversine_km, distance_between
from login_sentinel.detection.baseline import HourBaseline, compute_hour_baseline
from login_sentinel.detection.detector import AnomalyDetector
from login_sentinel.detection.brute_force import BruteForceMonitor

__all__ = [
    "DetectionConfig",
    "haversine_km",
    "distance_between",
    "HourBaseline",
    "compute_hour_baseline",
    "AnomalyDetector",
    "BruteForceMonitor",
]
