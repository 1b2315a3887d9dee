"""Smart alert evaluation over the most recent baby logs.

Each condition is checked independently and any subset may fire in the
same call.  Alerts are appended in a fixed order:

1. feed gap (warning)
2. fever (critical)
3. diaper gap (warning)
4. low feed count over the trailing 24h (warning)
5. medication spacing (critical, first violation only)

Nothing here reads the clock, the database or the settings store: the
caller supplies ``now`` and fully loaded inputs.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timedelta

from app.core.constants import MS_PER_HOUR
from app.models.alert import Alert, MedicationSpacingViolation, SmartAlertSettings
from app.models.enums import AlertLevel, TemperatureUnit
from app.models.logs import (
    DiaperLog,
    FeedEvent,
    MedicationLog,
    TemperatureLog,
    TimestampedLog,
)
from app.services.units import format_temp

logger = logging.getLogger(__name__)

_ONE_MS = timedelta(milliseconds=1)


def _format_threshold(value: float) -> str:
    """Render a threshold without a trailing ``.0`` for whole numbers."""
    return f"{value:g}"


def hours_between(start: datetime, end: datetime) -> float:
    """Fractional hours from *start* to *end* at millisecond precision."""
    delta_ms = (end - start) // _ONE_MS
    return delta_ms / MS_PER_HOUR


def hours_since(log: TimestampedLog, now: datetime) -> float:
    return hours_between(log.instant, now)


def find_medication_spacing_violation(
    medication_history: Sequence[MedicationLog],
) -> MedicationSpacingViolation | None:
    """Return the first re-dose given sooner than its minimum interval.

    The history is sorted oldest first and scanned pair by pair.  A pair
    counts only when both names match case-insensitively and the later
    entry declares a positive ``min_interval_hours``.  Scanning stops at the
    first violation.
    """
    ordered = sorted(medication_history, key=lambda log: log.timestamp)
    for previous, current in zip(ordered, ordered[1:]):
        if previous.medication_name.lower() != current.medication_name.lower():
            continue
        if not current.min_interval_hours:
            continue
        elapsed = hours_between(previous.instant, current.instant)
        if elapsed < current.min_interval_hours:
            return MedicationSpacingViolation(
                medication=current.medication_name,
                actual_hours=elapsed,
                min_hours=current.min_interval_hours,
            )
    return None


def evaluate_alerts(
    latest_feed: FeedEvent | None,
    latest_temperature: TemperatureLog | None,
    latest_diaper: DiaperLog | None,
    feeds_in_trailing_24h: int,
    medication_history: Sequence[MedicationLog],
    thresholds: SmartAlertSettings,
    now: datetime,
    temperature_unit: TemperatureUnit = TemperatureUnit.c,
) -> list[Alert]:
    """Evaluate every smart alert condition against the supplied logs.

    Missing latest logs skip their check.  Thresholds are compared as-is,
    so a NaN threshold never fires.  When ``thresholds.enabled`` is false
    nothing is evaluated and an empty list is returned.
    """
    if not thresholds.enabled:
        return []

    alerts: list[Alert] = []

    if latest_feed is not None:
        elapsed = hours_since(latest_feed, now)
        if elapsed >= thresholds.feed_gap_hours:
            alerts.append(
                Alert(
                    level=AlertLevel.warning,
                    message=(
                        f"No recent feed for {elapsed:.1f}h "
                        f"(threshold {_format_threshold(thresholds.feed_gap_hours)}h)."
                    ),
                )
            )

    if (
        latest_temperature is not None
        and latest_temperature.temperature_c >= thresholds.fever_threshold_c
    ):
        alerts.append(
            Alert(
                level=AlertLevel.critical,
                message=(
                    "Latest logged temperature is "
                    f"{format_temp(latest_temperature.temperature_c, temperature_unit)} "
                    f"(threshold {format_temp(thresholds.fever_threshold_c, temperature_unit)})."
                ),
            )
        )

    if latest_diaper is not None:
        elapsed = hours_since(latest_diaper, now)
        if elapsed >= thresholds.diaper_gap_hours:
            alerts.append(
                Alert(
                    level=AlertLevel.warning,
                    message=(
                        f"No diaper log for {elapsed:.1f}h "
                        f"(threshold {_format_threshold(thresholds.diaper_gap_hours)}h)."
                    ),
                )
            )

    if feeds_in_trailing_24h < thresholds.low_feeds_per_day:
        alerts.append(
            Alert(
                level=AlertLevel.warning,
                message=(
                    f"Only {feeds_in_trailing_24h} feed(s) in last 24h "
                    f"(target {_format_threshold(thresholds.low_feeds_per_day)})."
                ),
            )
        )

    violation = find_medication_spacing_violation(medication_history)
    if violation is not None:
        alerts.append(
            Alert(
                level=AlertLevel.critical,
                message=(
                    f"{violation.medication} given after {violation.actual_hours:.1f}h "
                    f"(minimum {_format_threshold(violation.min_hours)}h)."
                ),
            )
        )

    if alerts:
        logger.info(
            "smart_alerts_raised",
            extra={
                "alert_count": len(alerts),
                "critical_count": sum(
                    1 for alert in alerts if alert.level is AlertLevel.critical
                ),
            },
        )

    return alerts

