"""Batch refresh of AI daily insights.

Runs ``generate_daily_insights`` for the most recently updated babies so
the today screen usually finds a cached row.  Triggered by the scheduler
or manually through the API; the refresh lock guarantees a single run at a
time.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import date as Date
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from app.core.config import settings
from app.db.supabase import get_supabase
from app.scheduler.lock import acquire_refresh_lock, release_refresh_lock
from app.services.ai_insights import generate_daily_insights

logger = logging.getLogger(__name__)

MAX_BABIES_LIMIT = 200


def clamp_max_babies(value: Any) -> int:
    """Coerce *value* into ``1..200``; unusable input gives the default."""
    try:
        parsed = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return settings.INSIGHTS_MAX_BABIES
    return max(1, min(MAX_BABIES_LIMIT, parsed))


def _get_recent_babies(max_babies: int) -> list[dict[str, Any]]:
    client = get_supabase()
    result = (
        client.table("babies")
        .select("id, user_id, updated_at")
        .is_("deleted_at", "null")
        .order("updated_at", desc=True)
        .limit(max_babies)
        .execute()
    )
    return result.data or []


async def _refresh_babies(babies: list[dict[str, Any]], target: Date) -> dict[str, int]:
    counts = {"generated": 0, "cached": 0, "failed": 0}
    for baby in babies:
        try:
            result = await generate_daily_insights(baby["id"], target)
        except Exception as exc:
            counts["failed"] += 1
            logger.error(
                "insights_refresh_baby_failed",
                extra={
                    "baby_id": baby.get("id"),
                    "error_type": type(exc).__name__,
                    "error_message": str(exc),
                },
            )
            continue

        if result is None:
            counts["failed"] += 1
        elif result.cached:
            counts["cached"] += 1
        else:
            counts["generated"] += 1
    return counts


def run_insights_refresh(
    trigger: str = "scheduler",
    target: Date | None = None,
    max_babies: Any = None,
) -> dict[str, Any]:
    """Generate (or confirm cached) insights for up to *max_babies* babies.

    Parameters
    ----------
    trigger:
        Either "scheduler" or "manual" -- logged for observability.
    target:
        Calendar date to refresh; defaults to today (UTC).
    max_babies:
        Upper bound on babies processed, clamped to 1..200.

    Returns
    -------
    Dict with the run summary, or a skip marker when a run is in progress.
    """
    run_id = uuid4()
    target = target or datetime.now(timezone.utc).date()
    limit = (
        settings.INSIGHTS_MAX_BABIES if max_babies is None else clamp_max_babies(max_babies)
    )

    if not acquire_refresh_lock(run_id):
        logger.warning(
            "Insights refresh already running, skipping trigger",
            extra={"run_id": str(run_id), "trigger": trigger},
        )
        return {"status": "skipped", "reason": "refresh_already_running"}

    start_time = time.time()
    logger.info(
        "insights_refresh_start",
        extra={
            "run_id": str(run_id),
            "trigger": trigger,
            "date": target.isoformat(),
            "max_babies": limit,
        },
    )

    try:
        babies = _get_recent_babies(limit)
        counts = asyncio.run(_refresh_babies(babies, target))
        duration = time.time() - start_time
        status = "partial" if counts["failed"] else "success"

        logger.info(
            "insights_refresh_complete",
            extra={
                "run_id": str(run_id),
                "status": status,
                "duration_seconds": round(duration, 2),
                **counts,
            },
        )

        return {
            "run_id": str(run_id),
            "status": status,
            "date": target.isoformat(),
            "processed": len(babies),
            **counts,
            "duration_seconds": round(duration, 2),
        }

    except Exception as exc:
        duration = time.time() - start_time
        logger.error(
            "insights_refresh_error",
            extra={"run_id": str(run_id), "error": str(exc)},
        )
        return {
            "run_id": str(run_id),
            "status": "failed",
            "error": str(exc),
            "duration_seconds": round(duration, 2),
        }

    finally:
        release_refresh_lock()
