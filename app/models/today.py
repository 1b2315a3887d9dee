"""Response model for the today summary endpoint."""

from datetime import datetime

from pydantic import BaseModel

from app.models.alert import Alert
from app.models.enums import TemperatureUnit
from app.models.suggestion import Suggestion


class TodayGlance(BaseModel):
    """At-a-glance counters for the current calendar day.

    The day is the calendar day of the request's reference instant in its own
    UTC offset, so clients pass ``now`` with their local offset to count by
    their local day.  Without an offset the day is the UTC day.
    """
    feeds_today: int = 0
    diapers_today: int = 0
    latest_temperature: str | None = None
    temperature_unit: TemperatureUnit = TemperatureUnit.f


class TodayResponse(BaseModel):
    """Full response for GET /api/v1/babies/{baby_id}/today."""
    baby_id: str
    generated_at: datetime
    glance: TodayGlance = TodayGlance()
    suggestions: list[Suggestion] = []
    ai_available: bool = False
    alerts: list[Alert] = []
