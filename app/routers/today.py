"""Today summary endpoint."""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, HTTPException, Query

from app.models.today import TodayResponse
from app.services.today import build_today_summary

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/babies/{baby_id}/today", response_model=TodayResponse)
async def today_summary(
    baby_id: str,
    now: datetime | None = Query(
        default=None,
        description=(
            "Reference instant (ISO 8601, default: current time). Its UTC "
            "offset sets the calendar day used for the glance counters."
        ),
    ),
) -> TodayResponse:
    """Return glance counters, merged suggestions and active alerts."""
    try:
        return await build_today_summary(baby_id, now=now)
    except RuntimeError as exc:
        logger.error(
            "today_summary_failed",
            extra={"baby_id": baby_id, "error_message": str(exc)},
        )
        raise HTTPException(
            status_code=503,
            detail=f"Failed to build today summary: {exc}",
        ) from exc
