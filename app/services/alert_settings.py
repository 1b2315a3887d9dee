"""Loading and normalisation of smart alert settings.

The mobile app stores its settings as JSON strings in a key/value table.
This is the one place where defaults are substituted: each value is
validated against its accepted range and replaced by the default when it is
missing, non-numeric, non-finite or out of range.  The alert evaluator then
works with the resulting ``SmartAlertSettings`` as-is.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any

from app.core.constants import (
    DEFAULT_ALERTS_ENABLED,
    DEFAULT_DIAPER_GAP_HOURS,
    DEFAULT_FEED_GAP_HOURS,
    DEFAULT_FEVER_THRESHOLD_C,
    DEFAULT_LOW_FEEDS_PER_DAY,
    DIAPER_GAP_HOURS_RANGE,
    FEED_GAP_HOURS_RANGE,
    FEVER_THRESHOLD_C_RANGE,
    LOW_FEEDS_PER_DAY_RANGE,
)
from app.db.supabase import get_supabase
from app.models.alert import SmartAlertSettings
from app.models.enums import TemperatureUnit

logger = logging.getLogger(__name__)

SMART_ALERTS_KEY = "smart_alert_settings"
TEMP_UNIT_KEY = "temp_unit"

# Stored JSON uses the app's camelCase keys
_FIELD_ALIASES: dict[str, str] = {
    "enabled": "enabled",
    "feedGapHours": "feed_gap_hours",
    "diaperGapHours": "diaper_gap_hours",
    "feverThresholdC": "fever_threshold_c",
    "lowFeedsPerDay": "low_feeds_per_day",
}


def _parse_number(
    value: Any,
    fallback: float,
    bounds: tuple[float, float],
    integer: bool = False,
) -> float:
    """Return *value* as a number if it is finite and within *bounds*."""
    if isinstance(value, bool) or value is None:
        return fallback
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(parsed):
        return fallback
    if integer and not parsed.is_integer():
        return fallback
    low, high = bounds
    if parsed < low or parsed > high:
        return fallback
    return int(parsed) if integer else parsed


def normalize_smart_alert_settings(
    raw: dict[str, Any] | None,
) -> SmartAlertSettings:
    """Merge *raw* over the defaults and validate every field.

    Both the app's camelCase keys and snake_case keys are accepted.
    """
    merged: dict[str, Any] = {}
    for key, value in (raw or {}).items():
        merged[_FIELD_ALIASES.get(key, key)] = value

    return SmartAlertSettings(
        enabled=bool(merged.get("enabled", DEFAULT_ALERTS_ENABLED)),
        feed_gap_hours=_parse_number(
            merged.get("feed_gap_hours"), DEFAULT_FEED_GAP_HOURS, FEED_GAP_HOURS_RANGE
        ),
        diaper_gap_hours=_parse_number(
            merged.get("diaper_gap_hours"),
            DEFAULT_DIAPER_GAP_HOURS,
            DIAPER_GAP_HOURS_RANGE,
        ),
        fever_threshold_c=_parse_number(
            merged.get("fever_threshold_c"),
            DEFAULT_FEVER_THRESHOLD_C,
            FEVER_THRESHOLD_C_RANGE,
        ),
        low_feeds_per_day=_parse_number(
            merged.get("low_feeds_per_day"),
            DEFAULT_LOW_FEEDS_PER_DAY,
            LOW_FEEDS_PER_DAY_RANGE,
            integer=True,
        ),
    )


def _get_setting(baby_id: str, key: str) -> str | None:
    client = get_supabase()
    result = (
        client.table("app_settings")
        .select("value")
        .eq("baby_id", baby_id)
        .eq("key", key)
        .limit(1)
        .execute()
    )
    if not result.data:
        return None
    return result.data[0].get("value")


def get_smart_alert_settings(baby_id: str) -> SmartAlertSettings:
    """Read the stored smart alert settings for a baby.

    Unreadable storage or malformed JSON falls back to the defaults.
    """
    try:
        raw_value = _get_setting(baby_id, SMART_ALERTS_KEY)
    except Exception as exc:
        logger.warning(
            "smart_alert_settings_read_failed",
            extra={"baby_id": baby_id, "error_message": str(exc)},
        )
        return normalize_smart_alert_settings(None)

    parsed: Any = None
    if raw_value:
        try:
            parsed = json.loads(raw_value)
        except json.JSONDecodeError:
            logger.warning(
                "smart_alert_settings_invalid_json",
                extra={"baby_id": baby_id},
            )

    return normalize_smart_alert_settings(parsed if isinstance(parsed, dict) else None)


def get_temperature_unit(baby_id: str) -> TemperatureUnit:
    """Return the stored display unit, defaulting to Fahrenheit."""
    try:
        raw_value = _get_setting(baby_id, TEMP_UNIT_KEY)
    except Exception as exc:
        logger.warning(
            "temp_unit_read_failed",
            extra={"baby_id": baby_id, "error_message": str(exc)},
        )
        return TemperatureUnit.f

    try:
        return TemperatureUnit(raw_value)
    except ValueError:
        return TemperatureUnit.f
