"""Today screen coordinator.

Loads logs and settings from Supabase, then hands fully materialised inputs
to the pure engines (``merge_suggestions`` and ``evaluate_alerts``).

Storage failures while loading logs surface as ``RuntimeError``; AI and
settings failures degrade to rules-only suggestions and default thresholds.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from app.core.config import settings
from app.models.alert import AlertsResponse
from app.models.enums import TemperatureUnit
from app.models.suggestion import SuggestionsResponse
from app.models.today import TodayGlance, TodayResponse
from app.services.ai_insights import get_daily_insights
from app.services.alert_settings import get_smart_alert_settings, get_temperature_unit
from app.services.alerts import evaluate_alerts
from app.services.logs import (
    count_feeds_in_trailing_24h,
    count_feeds_since,
    get_latest_diaper,
    get_latest_feed,
    get_latest_temperature,
    list_diapers,
    list_feeds,
    list_recent_medications,
    list_temperatures,
)
from app.services.routine_suggestions import build_routine_suggestions
from app.services.suggestion_merge import merge_suggestions
from app.services.units import format_temp

logger = logging.getLogger(__name__)

ROUTINE_FEED_LOOKBACK = timedelta(days=7)
ROUTINE_DIAPER_LOOKBACK = timedelta(hours=72)
ROUTINE_TEMPERATURE_LIMIT = 50


def _resolve_now(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def _start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def build_alerts(
    baby_id: str,
    now: datetime | None = None,
    temperature_unit: TemperatureUnit | None = None,
) -> AlertsResponse:
    """Evaluate smart alerts for a baby from its stored logs."""
    now = _resolve_now(now)
    thresholds = get_smart_alert_settings(baby_id)
    unit = temperature_unit or get_temperature_unit(baby_id)

    if not thresholds.enabled:
        return AlertsResponse(alerts=[], evaluated_at=now)

    try:
        latest_feed = get_latest_feed(baby_id)
        latest_temperature = get_latest_temperature(baby_id)
        latest_diaper = get_latest_diaper(baby_id)
        feeds_24h = count_feeds_in_trailing_24h(baby_id, now)
        medications = list_recent_medications(baby_id, settings.MEDICATION_HISTORY_LIMIT)
    except Exception as exc:
        logger.error(
            "alert_inputs_load_failed",
            extra={"baby_id": baby_id, "error_message": str(exc)},
        )
        raise RuntimeError(f"Failed to load logs for alerts: {exc}") from exc

    alerts = evaluate_alerts(
        latest_feed=latest_feed,
        latest_temperature=latest_temperature,
        latest_diaper=latest_diaper,
        feeds_in_trailing_24h=feeds_24h,
        medication_history=medications,
        thresholds=thresholds,
        now=now,
        temperature_unit=unit,
    )
    return AlertsResponse(alerts=alerts, evaluated_at=now)


async def build_suggestions(
    baby_id: str,
    now: datetime | None = None,
    max_count: int | None = None,
) -> SuggestionsResponse:
    """Merge the rule suggestions with today's AI insights, if any."""
    now = _resolve_now(now)

    try:
        feeds = list_feeds(baby_id, since=now - ROUTINE_FEED_LOOKBACK)
        diapers = list_diapers(baby_id, since=now - ROUTINE_DIAPER_LOOKBACK)
        temperatures = list_temperatures(baby_id, limit=ROUTINE_TEMPERATURE_LIMIT)
        medications = list_recent_medications(baby_id)
    except Exception as exc:
        logger.error(
            "suggestion_inputs_load_failed",
            extra={"baby_id": baby_id, "error_message": str(exc)},
        )
        raise RuntimeError(f"Failed to load logs for suggestions: {exc}") from exc

    rules = build_routine_suggestions(feeds, diapers, temperatures, medications, now)
    ai_response = await get_daily_insights(baby_id, now.date())

    merged = merge_suggestions(
        rules,
        ai_response,
        max_count or settings.SUGGESTIONS_MAX_COUNT,
    )
    return SuggestionsResponse(
        suggestions=merged,
        ai_available=bool(ai_response and ai_response.suggestions),
        date=now.date(),
    )


def build_glance(
    baby_id: str,
    now: datetime,
    temperature_unit: TemperatureUnit,
) -> TodayGlance:
    """Count today's feeds and diapers from local midnight of *now*.

    Midnight keeps the offset of *now*, so an aware ``now`` counts by its own
    calendar day rather than the UTC one.
    """
    day_start = _start_of_day(now)
    latest_temperature = get_latest_temperature(baby_id)
    return TodayGlance(
        feeds_today=count_feeds_since(baby_id, day_start),
        diapers_today=len(list_diapers(baby_id, since=day_start)),
        latest_temperature=(
            format_temp(latest_temperature.temperature_c, temperature_unit)
            if latest_temperature is not None
            else None
        ),
        temperature_unit=temperature_unit,
    )


async def build_today_summary(
    baby_id: str,
    now: datetime | None = None,
) -> TodayResponse:
    """Everything the today screen shows: glance, suggestions and alerts."""
    now = _resolve_now(now)
    unit = get_temperature_unit(baby_id)

    try:
        glance = build_glance(baby_id, now, unit)
    except Exception as exc:
        logger.error(
            "today_glance_load_failed",
            extra={"baby_id": baby_id, "error_message": str(exc)},
        )
        raise RuntimeError(f"Failed to load today summary: {exc}") from exc

    suggestions = await build_suggestions(baby_id, now)
    alerts = build_alerts(baby_id, now, unit)

    return TodayResponse(
        baby_id=baby_id,
        generated_at=now,
        glance=glance,
        suggestions=suggestions.suggestions,
        ai_available=suggestions.ai_available,
        alerts=alerts.alerts,
    )
