"""Pydantic models for smart alerts and their thresholds."""

from datetime import datetime

from pydantic import BaseModel, Field

from app.core.constants import (
    DEFAULT_ALERTS_ENABLED,
    DEFAULT_DIAPER_GAP_HOURS,
    DEFAULT_FEED_GAP_HOURS,
    DEFAULT_FEVER_THRESHOLD_C,
    DEFAULT_LOW_FEEDS_PER_DAY,
)
from app.models.enums import AlertLevel, TemperatureUnit
from app.models.logs import DiaperLog, FeedEvent, MedicationLog, TemperatureLog


class SmartAlertSettings(BaseModel):
    """User-configurable alert thresholds.

    Values are taken as given; range checks happen when settings are
    loaded (see ``app.services.alert_settings``).
    """
    enabled: bool = DEFAULT_ALERTS_ENABLED
    feed_gap_hours: float = DEFAULT_FEED_GAP_HOURS
    diaper_gap_hours: float = DEFAULT_DIAPER_GAP_HOURS
    fever_threshold_c: float = DEFAULT_FEVER_THRESHOLD_C
    low_feeds_per_day: float = DEFAULT_LOW_FEEDS_PER_DAY


AlertThresholds = SmartAlertSettings


class Alert(BaseModel):
    """A threshold-violation notice."""
    level: AlertLevel
    message: str


class MedicationSpacingViolation(BaseModel):
    """A re-dose recorded sooner than its declared minimum interval."""
    medication: str
    actual_hours: float
    min_hours: float


class EvaluateAlertsRequest(BaseModel):
    """Body for POST /api/v1/alerts/evaluate."""
    latest_feed: FeedEvent | None = None
    latest_temperature: TemperatureLog | None = None
    latest_diaper: DiaperLog | None = None
    feeds_in_trailing_24h: int = Field(default=0, ge=0)
    medication_history: list[MedicationLog] = []
    thresholds: SmartAlertSettings = SmartAlertSettings()
    now: datetime
    temperature_unit: TemperatureUnit = TemperatureUnit.c


class AlertsResponse(BaseModel):
    """Alerts computed for one evaluation."""
    alerts: list[Alert] = []
    evaluated_at: datetime | None = None
