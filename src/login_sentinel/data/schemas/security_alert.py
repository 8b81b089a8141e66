"""SecurityAlert schema - canonical definition."""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator, model_validator

from login_sentinel.core.types import AlertSeverity, AlertType
from login_sentinel.data.schemas.login_attempt import ensure_utc


def _new_alert_id() -> str:
    return f"alt_{uuid4().hex[:12]}"


class SecurityAlert(BaseModel):
    """Security alert produced by the detection engine.

    Severity is fixed per alert type. The source attempt is a
    back-reference only: the attempt may be purged independently.
    """
    alert_id: str = Field(default_factory=_new_alert_id, description="Unique alert identifier")
    user_id: str = Field(..., min_length=1, description="Owning user")
    alert_type: AlertType = Field(..., description="Kind of anomaly detected")
    severity: AlertSeverity = Field(..., description="Severity, fixed per alert type")
    details: str = Field(..., description="Human-readable explanation")
    source_login_attempt_id: Optional[str] = Field(
        default=None, description="Attempt that triggered the alert"
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Detection timestamp (UTC)",
    )
    resolved: bool = Field(default=False, description="Set by the triage workflow")

    model_config = {
        "json_schema_extra": {
            "example": {
                "alert_id": "alt_5d1f0c9a2b7e",
                "user_id": "user_abc123",
                "alert_type": "IMPOSSIBLE_TRAVEL",
                "severity": "CRITICAL",
                "details": "Impossible travel detected: 862 km from Riyadh, SA to Jeddah, SA in 10 minutes",
                "source_login_attempt_id": "att_abc123",
                "created_at": "2026-01-25T14:30:05Z",
                "resolved": False,
            }
        }
    }

    @field_validator("created_at")
    @classmethod
    def _normalize_to_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @model_validator(mode="after")
    def _severity_matches_type(self) -> "SecurityAlert":
        expected = self.alert_type.severity
        if self.severity != expected:
            raise ValueError(
                f"{self.alert_type.value} alerts must have severity {expected.value}, "
                f"got {self.severity.value}"
            )
        return self

    @classmethod
    def create(
        cls,
        alert_type: AlertType,
        user_id: str,
        details: str,
        source_login_attempt_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> "SecurityAlert":
        """Create an alert with the severity derived from its type."""
        return cls(
            user_id=user_id,
            alert_type=alert_type,
            severity=alert_type.severity,
            details=details,
            source_login_attempt_id=source_login_attempt_id,
            created_at=created_at or datetime.now(timezone.utc),
        )
