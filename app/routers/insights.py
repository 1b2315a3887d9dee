"""AI daily insights endpoints.

GET /babies/{baby_id}/insights returns the (possibly cached) AI batch for
a date; POST /insights/refresh starts the batch refresh in the background
and returns 409 while a refresh is already running.
"""

from __future__ import annotations

import logging
import threading
from datetime import date as Date
from typing import Any

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from app.models.suggestion import AiInsightsResponse
from app.scheduler.lock import get_current_run_id, is_refresh_running
from app.services.ai_insights import get_daily_insights
from app.services.insights_refresh import run_insights_refresh

logger = logging.getLogger(__name__)

router = APIRouter()


class RefreshRequest(BaseModel):
    """Optional request body for the refresh endpoint."""
    date: Date | None = None
    max_babies: int | None = Field(default=None, ge=1, le=200)


@router.get("/babies/{baby_id}/insights", response_model=AiInsightsResponse)
async def baby_insights(
    baby_id: str,
    date: Date | None = Query(default=None, description="Calendar date (default: today)"),
) -> AiInsightsResponse:
    """Return the AI insights for a baby, 404 when none are available."""
    result = await get_daily_insights(baby_id, date)
    if result is None:
        raise HTTPException(status_code=404, detail="AI insights unavailable")
    return result


@router.post("/insights/refresh", status_code=202)
async def trigger_insights_refresh(
    body: RefreshRequest | None = None,
) -> dict[str, Any]:
    """Start the insights refresh in a background thread."""
    if is_refresh_running():
        current_run = get_current_run_id()
        raise HTTPException(
            status_code=409,
            detail="Insights refresh already in progress",
            headers={"X-Current-Run-Id": str(current_run) if current_run else "unknown"},
        )

    target = body.date if body else None
    max_babies = body.max_babies if body else None

    def _run_refresh() -> None:
        run_insights_refresh(trigger="manual", target=target, max_babies=max_babies)

    thread = threading.Thread(target=_run_refresh, daemon=True)
    thread.start()

    return {
        "status": "started",
        "date": target.isoformat() if target else None,
        "message": "Insights refresh initiated",
    }
