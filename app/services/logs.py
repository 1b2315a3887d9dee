"""Read access to the baby log tables in Supabase.

Every query excludes soft-deleted rows and orders newest first unless
stated otherwise.  Rows are parsed into the models from ``app.models.logs``.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, TypeVar

from app.core.config import settings
from app.db.supabase import get_supabase
from app.models.logs import (
    DiaperLog,
    FeedEvent,
    MedicationLog,
    MilestoneLog,
    TemperatureLog,
    TimestampedLog,
)

LogT = TypeVar("LogT", bound=TimestampedLog)

FEEDS_TABLE = "feed_events"
DIAPERS_TABLE = "diaper_logs"
TEMPERATURES_TABLE = "temperature_logs"
MEDICATIONS_TABLE = "medication_logs"
MILESTONES_TABLE = "milestones"


def to_iso(instant: datetime) -> str:
    """Serialize *instant* the way the app stores timestamps (UTC, ms, ``Z``)."""
    return instant.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def _select_logs(
    table: str,
    model: type[LogT],
    baby_id: str,
    since: datetime | None = None,
    until: datetime | None = None,
    limit: int | None = None,
) -> list[LogT]:
    client = get_supabase()
    query = (
        client.table(table)
        .select("*")
        .eq("baby_id", baby_id)
        .is_("deleted_at", "null")
    )
    if since is not None:
        query = query.gte("timestamp", to_iso(since))
    if until is not None:
        query = query.lte("timestamp", to_iso(until))
    query = query.order("timestamp", desc=True)
    if limit is not None:
        query = query.limit(limit)

    result = query.execute()
    rows: list[dict[str, Any]] = result.data or []
    return [model(**row) for row in rows]


def _latest(table: str, model: type[LogT], baby_id: str) -> LogT | None:
    rows = _select_logs(table, model, baby_id, limit=1)
    return rows[0] if rows else None


def get_latest_feed(baby_id: str) -> FeedEvent | None:
    return _latest(FEEDS_TABLE, FeedEvent, baby_id)


def get_latest_diaper(baby_id: str) -> DiaperLog | None:
    return _latest(DIAPERS_TABLE, DiaperLog, baby_id)


def get_latest_temperature(baby_id: str) -> TemperatureLog | None:
    return _latest(TEMPERATURES_TABLE, TemperatureLog, baby_id)


def count_feeds_since(baby_id: str, since: datetime) -> int:
    """Count feeds logged at or after *since*."""
    client = get_supabase()
    result = (
        client.table(FEEDS_TABLE)
        .select("id", count="exact")
        .eq("baby_id", baby_id)
        .is_("deleted_at", "null")
        .gte("timestamp", to_iso(since))
        .execute()
    )
    if result.count is not None:
        return int(result.count)
    return len(result.data or [])


def count_feeds_in_trailing_24h(baby_id: str, now: datetime) -> int:
    return count_feeds_since(baby_id, now - timedelta(hours=24))


def list_recent_medications(
    baby_id: str,
    limit: int | None = None,
) -> list[MedicationLog]:
    """Most recent medication logs, newest first (bounded window)."""
    return _select_logs(
        MEDICATIONS_TABLE,
        MedicationLog,
        baby_id,
        limit=limit or settings.MEDICATION_HISTORY_LIMIT,
    )


def list_feeds(
    baby_id: str,
    since: datetime | None = None,
    until: datetime | None = None,
    limit: int | None = None,
) -> list[FeedEvent]:
    return _select_logs(FEEDS_TABLE, FeedEvent, baby_id, since, until, limit)


def list_diapers(
    baby_id: str,
    since: datetime | None = None,
    until: datetime | None = None,
    limit: int | None = None,
) -> list[DiaperLog]:
    return _select_logs(DIAPERS_TABLE, DiaperLog, baby_id, since, until, limit)


def list_temperatures(
    baby_id: str,
    since: datetime | None = None,
    until: datetime | None = None,
    limit: int | None = None,
) -> list[TemperatureLog]:
    return _select_logs(
        TEMPERATURES_TABLE, TemperatureLog, baby_id, since, until, limit
    )


def list_medications(
    baby_id: str,
    since: datetime | None = None,
    until: datetime | None = None,
    limit: int | None = None,
) -> list[MedicationLog]:
    return _select_logs(MEDICATIONS_TABLE, MedicationLog, baby_id, since, until, limit)


def list_milestones(
    baby_id: str,
    since: datetime | None = None,
    until: datetime | None = None,
    limit: int | None = None,
) -> list[MilestoneLog]:
    return _select_logs(MILESTONES_TABLE, MilestoneLog, baby_id, since, until, limit)

