"""Deterministic (rule-based) suggestions computed from recent logs.

These are always available, with or without AI, and come out in priority
order: feed window, diaper rhythm, temperature trend, medication window.
When none applies a single "build your baseline" suggestion is returned.

Clock-dependent values (feed hours, next dose time) are rendered in the
timezone of ``now`` so callers pass an aware datetime in the user's zone.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timedelta

from app.core.constants import HIGH_TEMPERATURE_C, ROUTINE_SUGGESTIONS_MAX
from app.models.logs import DiaperLog, FeedEvent, MedicationLog, TemperatureLog
from app.models.suggestion import RoutineSuggestion

FEED_WINDOW_DAYS = 7
FEED_WINDOW_MIN_FEEDS = 5
FEED_WINDOW_SAMPLE = 20
DIAPER_WINDOW_HOURS = 72
HIGH_TEMPERATURE_SAMPLE = 5
HIGH_TEMPERATURE_MIN_COUNT = 2


def _feed_window(
    feeds: Sequence[FeedEvent], now: datetime
) -> RoutineSuggestion | None:
    cutoff = now - timedelta(days=FEED_WINDOW_DAYS)
    recent = [feed for feed in feeds if feed.instant >= cutoff]
    if len(recent) < FEED_WINDOW_MIN_FEEDS:
        return None

    hours = sorted(
        feed.instant.astimezone(now.tzinfo).hour
        for feed in recent[:FEED_WINDOW_SAMPLE]
    )
    median_hour = hours[len(hours) // 2]
    return RoutineSuggestion(
        id="feed-window",
        title="Likely next feed window",
        detail=(
            f"Most feeds cluster around {median_hour:02d}:00. "
            "Consider preparing 30 minutes earlier."
        ),
    )


def _diaper_rate(
    diapers: Sequence[DiaperLog], now: datetime
) -> RoutineSuggestion | None:
    cutoff = now - timedelta(hours=DIAPER_WINDOW_HOURS)
    recent = [diaper for diaper in diapers if diaper.instant >= cutoff]
    if not recent:
        return None

    per_day = len(recent) / (DIAPER_WINDOW_HOURS / 24)
    return RoutineSuggestion(
        id="diaper-rate",
        title="Diaper rhythm",
        detail=f"Average {per_day:.1f} diaper logs/day over last 3 days.",
    )


def _temperature_trend(
    temperatures: Sequence[TemperatureLog],
) -> RoutineSuggestion | None:
    high = [
        reading
        for reading in temperatures
        if reading.temperature_c >= HIGH_TEMPERATURE_C
    ][:HIGH_TEMPERATURE_SAMPLE]
    if len(high) < HIGH_TEMPERATURE_MIN_COUNT:
        return None

    return RoutineSuggestion(
        id="temp-trend",
        title="Temperature trend watch",
        detail=(
            f"{len(high)} high-temperature entries were logged recently. "
            "Keep monitoring and seek medical guidance if needed."
        ),
    )


def _medication_window(
    medications: Sequence[MedicationLog], now: datetime
) -> RoutineSuggestion | None:
    with_interval = [
        log
        for log in medications
        if log.min_interval_hours is not None and log.min_interval_hours > 0
    ]
    if not with_interval:
        return None

    latest = with_interval[0]
    due_at = latest.instant + timedelta(hours=latest.min_interval_hours or 0)
    due_local = due_at.astimezone(now.tzinfo)
    due_label = f"{due_local.hour % 12 or 12}:{due_local.minute:02d} {due_local:%p}"
    return RoutineSuggestion(
        id="med-next-window",
        title="Medication spacing reminder",
        detail=f"{latest.medication_name} next safe window starts around {due_label}.",
    )


def build_routine_suggestions(
    feeds: Sequence[FeedEvent],
    diapers: Sequence[DiaperLog],
    temperatures: Sequence[TemperatureLog],
    medications: Sequence[MedicationLog],
    now: datetime,
) -> list[RoutineSuggestion]:
    """Build the rule suggestions for the today screen.

    All log sequences are expected newest first.

    Returns
    -------
    Up to four suggestions in priority order, never empty.
    """
    candidates = [
        _feed_window(feeds, now),
        _diaper_rate(diapers, now),
        _temperature_trend(temperatures),
        _medication_window(medications, now),
    ]
    suggestions = [item for item in candidates if item is not None]

    if not suggestions:
        suggestions.append(
            RoutineSuggestion(
                id="start-data",
                title="Build your baseline",
                detail=(
                    "Log feeds, temperatures, and diapers for 2-3 days "
                    "to unlock personalized suggestions."
                ),
            )
        )

    return suggestions[:ROUTINE_SUGGESTIONS_MAX]
