"""LoginAttempt schema - canonical definition."""

import math
from datetime import datetime, timezone
from typing import Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from login_sentinel.core.types import LoginOutcome


def ensure_utc(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class LoginAttempt(BaseModel):
    """Login attempt entity schema.

    A persisted authentication event, read-only to the detection engine.
    Failed attempts may omit user_id (unknown accounts) and only ever
    feed the brute-force monitor.
    """
    attempt_id: str = Field(..., description="Unique attempt identifier")
    user_id: Optional[str] = Field(
        default=None, description="Acting user, absent for unknown accounts"
    )
    timestamp: datetime = Field(..., description="Attempt timestamp (UTC)")
    ip_address: str = Field(..., description="Client IP address")
    user_agent: str = Field(default="", description="Client user agent string")
    device_fingerprint: Optional[str] = Field(
        default=None, description="Stable per-installation client identifier"
    )
    country: Optional[str] = Field(default=None, description="Geo-resolved country")
    city: Optional[str] = Field(default=None, description="Geo-resolved city")
    latitude: Optional[float] = Field(default=None, description="Decimal degrees")
    longitude: Optional[float] = Field(default=None, description="Decimal degrees")
    outcome: LoginOutcome = Field(..., description="success or failure")

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "example": {
                "attempt_id": "att_abc123",
                "user_id": "user_abc123",
                "timestamp": "2026-01-25T14:30:05Z",
                "ip_address": "192.168.1.100",
                "user_agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64)",
                "device_fingerprint": "fp_9f2c1e",
                "country": "SA",
                "city": "Riyadh",
                "latitude": 24.7136,
                "longitude": 46.6753,
                "outcome": "success",
            }
        }
    }

    @field_validator("timestamp")
    @classmethod
    def _normalize_to_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @property
    def is_success(self) -> bool:
        return self.outcome == LoginOutcome.SUCCESS

    @property
    def coordinates(self) -> Optional[Tuple[float, float]]:
        """(latitude, longitude) when both are present and finite."""
        if self.latitude is None or self.longitude is None:
            return None
        if not (math.isfinite(self.latitude) and math.isfinite(self.longitude)):
            return None
        return (self.latitude, self.longitude)

    @property
    def location_key(self) -> Optional[Tuple[str, Optional[str]]]:
        """(country, city) pair, or None when no country was resolved."""
        if not self.country:
            return None
        return (self.country, self.city or None)

    @property
    def location_label(self) -> str:
        if self.city and self.country:
            return f"{self.city}, {self.country}"
        return self.country or self.city or "Unknown"
