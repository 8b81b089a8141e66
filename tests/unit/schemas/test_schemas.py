"""Tests for LoginAttempt and SecurityAlert schemas."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from login_sentinel.core.types import AlertSeverity, AlertType, LoginOutcome
from login_sentinel.data.schemas import LoginAttempt, SecurityAlert


def _attempt(**overrides):
    data = {
        "attempt_id": "att_1",
        "user_id": "user_1",
        "timestamp": datetime(2026, 1, 25, 14, 30, tzinfo=timezone.utc),
        "ip_address": "192.168.1.100",
        "outcome": LoginOutcome.SUCCESS,
    }
    data.update(overrides)
    return LoginAttempt(**data)


class TestLoginAttempt:
    """Tests for LoginAttempt."""

    def test_naive_timestamp_is_utc(self):
        attempt = _attempt(timestamp=datetime(2026, 1, 25, 14, 30))
        assert attempt.timestamp.tzinfo == timezone.utc
        assert attempt.timestamp.hour == 14

    def test_aware_timestamp_converted_to_utc(self):
        riyadh = timezone(timedelta(hours=3))
        attempt = _attempt(timestamp=datetime(2026, 1, 25, 17, 30, tzinfo=riyadh))
        assert attempt.timestamp == datetime(2026, 1, 25, 14, 30, tzinfo=timezone.utc)
        assert attempt.timestamp.utcoffset() == timedelta(0)

    def test_outcome_from_string(self):
        assert _attempt(outcome="failure").outcome == LoginOutcome.FAILURE
        assert not _attempt(outcome="failure").is_success

    def test_frozen(self):
        attempt = _attempt()
        with pytest.raises(ValidationError):
            attempt.user_id = "someone_else"

    def test_coordinates(self):
        assert _attempt(latitude=24.7, longitude=46.6).coordinates == (24.7, 46.6)
        assert _attempt(latitude=24.7).coordinates is None
        assert _attempt(latitude=float("nan"), longitude=46.6).coordinates is None

    def test_location_key_and_label(self):
        full = _attempt(country="SA", city="Riyadh")
        assert full.location_key == ("SA", "Riyadh")
        assert full.location_label == "Riyadh, SA"

        country_only = _attempt(country="SA")
        assert country_only.location_key == ("SA", None)
        assert country_only.location_label == "SA"

        nothing = _attempt()
        assert nothing.location_key is None
        assert nothing.location_label == "Unknown"

    def test_anonymous_failed_attempt(self):
        attempt = _attempt(user_id=None, outcome=LoginOutcome.FAILURE)
        assert attempt.user_id is None


class TestSecurityAlert:
    """Tests for SecurityAlert."""

    def test_create_derives_severity(self):
        alert = SecurityAlert.create(AlertType.IMPOSSIBLE_TRAVEL, "user_1", "details")
        assert alert.severity == AlertSeverity.CRITICAL
        assert alert.alert_id.startswith("alt_")
        assert alert.resolved is False
        assert alert.created_at.tzinfo == timezone.utc

    def test_mismatched_severity_rejected(self):
        with pytest.raises(ValidationError):
            SecurityAlert(
                user_id="user_1",
                alert_type=AlertType.NEW_DEVICE,
                severity=AlertSeverity.CRITICAL,
                details="details",
            )

    def test_user_required(self):
        with pytest.raises(ValidationError):
            SecurityAlert.create(AlertType.BRUTE_FORCE, "", "details")

    def test_unique_ids(self):
        first = SecurityAlert.create(AlertType.NEW_DEVICE, "user_1", "a")
        second = SecurityAlert.create(AlertType.NEW_DEVICE, "user_1", "a")
        assert first.alert_id != second.alert_id

    def test_json_round_trip_keeps_enums(self):
        alert = SecurityAlert.create(AlertType.BRUTE_FORCE, "user_1", "details", "att_9")
        restored = SecurityAlert.model_validate_json(alert.model_dump_json())
        assert restored == alert


class TestSeverityMapping:
    """Tests for the fixed alert-type severities."""

    @pytest.mark.parametrize("alert_type,severity", [
        (AlertType.IMPOSSIBLE_TRAVEL, AlertSeverity.CRITICAL),
        (AlertType.NEW_DEVICE, AlertSeverity.MEDIUM),
        (AlertType.NEW_LOCATION, AlertSeverity.MEDIUM),
        (AlertType.UNUSUAL_TIME, AlertSeverity.LOW),
        (AlertType.BRUTE_FORCE, AlertSeverity.HIGH),
    ])
    def test_severity(self, alert_type, severity):
        assert alert_type.severity == severity

    def test_every_type_mapped(self):
        from login_sentinel.core.types import SEVERITY_BY_ALERT_TYPE

        assert set(SEVERITY_BY_ALERT_TYPE) == set(AlertType)
