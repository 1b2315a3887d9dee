"""Background scheduling of the AI insights refresh.

One ``BackgroundScheduler`` per process runs ``run_insights_refresh`` every
``INSIGHTS_REFRESH_INTERVAL_HOURS``.  Started and stopped by the FastAPI
lifespan in ``app.main``.
"""

from __future__ import annotations

import logging
from datetime import datetime

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.core.config import settings
from app.services.insights_refresh import run_insights_refresh

logger = logging.getLogger(__name__)

INSIGHTS_JOB_ID = "insights_refresh"

scheduler = BackgroundScheduler(timezone="UTC")


def _insights_job() -> None:
    run_insights_refresh(trigger="scheduler")


def start_scheduler() -> None:
    """Register the refresh job and start ticking.

    Missed ticks collapse into one run and never overlap; the refresh lock
    covers manual triggers racing the scheduler.
    """
    scheduler.add_job(
        _insights_job,
        IntervalTrigger(hours=settings.INSIGHTS_REFRESH_INTERVAL_HOURS),
        id=INSIGHTS_JOB_ID,
        replace_existing=True,
        coalesce=True,
        max_instances=1,
    )
    scheduler.start()
    logger.info(
        "scheduler_started",
        extra={
            "job_id": INSIGHTS_JOB_ID,
            "interval_hours": settings.INSIGHTS_REFRESH_INTERVAL_HOURS,
        },
    )


def shutdown_scheduler() -> None:
    if not scheduler.running:
        return
    scheduler.shutdown(wait=False)
    logger.info("scheduler_stopped", extra={"job_id": INSIGHTS_JOB_ID})


def is_scheduler_running() -> bool:
    return scheduler.running


def get_next_refresh_time() -> datetime | None:
    """When the refresh job fires next, or None if it is not scheduled."""
    job = scheduler.get_job(INSIGHTS_JOB_ID)
    if job is None:
        return None
    return job.next_run_time
