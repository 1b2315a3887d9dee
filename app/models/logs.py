"""Pydantic models for the baby log tables read by the alert engine.

Only the columns the insights service needs are modelled; rows coming back
from Supabase carry more (``created_at``, ``dirty``...) and extras are
ignored.

Timestamps stay ISO-8601 strings: every writer uses the same UTC format, so
lexicographic order is chronological order.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, TypeAdapter

from app.models.enums import FeedSide, FeedType, MedicationDoseUnit, PoopSize

_INSTANT = TypeAdapter(datetime)


class TimestampedLog(BaseModel):
    """Common shape for every log row: an id, a baby and an instant."""
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: str | None = None
    baby_id: str | None = None
    timestamp: str

    @property
    def instant(self) -> datetime:
        """Parse ``timestamp`` into an aware datetime.

        PostgREST trims trailing zeros from fractional seconds
        (``10:00:00.12+00:00``), so parsing goes through pydantic rather than
        ``datetime.fromisoformat``.
        """
        return _INSTANT.validate_python(self.timestamp)


class FeedEvent(TimestampedLog):
    type: FeedType = FeedType.bottle
    amount_ml: float | None = None
    duration_minutes: float | None = None
    side: FeedSide = FeedSide.none
    notes: str | None = None


class DiaperLog(TimestampedLog):
    had_pee: bool = False
    had_poop: bool = False
    poop_size: PoopSize | None = None
    notes: str | None = None


class TemperatureLog(TimestampedLog):
    temperature_c: float
    notes: str | None = None


class MedicationLog(TimestampedLog):
    medication_name: str
    dose_value: float | None = None
    dose_unit: MedicationDoseUnit | None = None
    min_interval_hours: float | None = None
    notes: str | None = None


class MilestoneLog(TimestampedLog):
    title: str
    notes: str | None = None
