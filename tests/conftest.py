"""Shared test fixtures for login-sentinel."""

import itertools
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

import pytest

from login_sentinel.core.types import LoginOutcome
from login_sentinel.data.schemas import LoginAttempt
from login_sentinel.detection.config import DetectionConfig
from login_sentinel.stores import InMemoryAlertStore, InMemoryLoginHistoryStore

PLACES = {
    "riyadh": {"country": "SA", "city": "Riyadh", "latitude": 24.7136, "longitude": 46.6753},
    "jeddah": {"country": "SA", "city": "Jeddah", "latitude": 21.4858, "longitude": 39.1925},
    "dammam": {"country": "SA", "city": "Dammam", "latitude": 26.4207, "longitude": 50.0888},
    "london": {"country": "GB", "city": "London", "latitude": 51.5074, "longitude": -0.1278},
}


@pytest.fixture
def base_time():
    """Fixed reference instant, mid-morning UTC."""
    return datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_attempt():
    """Factory for LoginAttempt with sensible defaults.

    `location` names an entry in PLACES; pass None for an attempt with no
    geo data.
    """
    counter = itertools.count(1)

    def _make(timestamp, user_id="user_001", outcome=LoginOutcome.SUCCESS,
              ip_address="10.0.0.1", device_fingerprint="fp_laptop",
              user_agent="Mozilla/5.0", location="riyadh", **overrides):
        fields = dict(PLACES[location]) if location else {}
        fields.update(overrides)
        return LoginAttempt(
            attempt_id=fields.pop("attempt_id", f"att_{next(counter):04d}"),
            user_id=user_id,
            timestamp=timestamp,
            ip_address=ip_address,
            user_agent=user_agent,
            device_fingerprint=device_fingerprint,
            outcome=outcome,
            **fields,
        )

    return _make


@pytest.fixture
def history():
    return InMemoryLoginHistoryStore()


@pytest.fixture
def alert_store():
    return InMemoryAlertStore()


@pytest.fixture
def detection_config():
    return DetectionConfig()


@pytest.fixture
def executor():
    """Private rule executor so tests do not share the module-level pool."""
    pool = ThreadPoolExecutor(max_workers=4, thread_name_prefix="TestRuleWorker")
    yield pool
    pool.shutdown(wait=True)
