"""Liveness and dependency status.

``GET /health`` probes Supabase with a one-row read of ``babies`` and
reports the scheduler and the insights refresh.  Answers 503 when the
database cannot be reached.
"""

import logging
from typing import Any

from fastapi import APIRouter
from starlette.responses import JSONResponse

from app.db.supabase import get_supabase
from app.scheduler.jobs import get_next_refresh_time, is_scheduler_running
from app.scheduler.lock import get_refresh_status

logger = logging.getLogger(__name__)

router = APIRouter()


def _database_reachable() -> bool:
    try:
        result = get_supabase().table("babies").select("id").limit(1).execute()
    except Exception:
        logger.warning("health_database_unreachable", exc_info=True)
        return False
    return result is not None


@router.get("/health")
async def health_check() -> Any:
    database_ok = _database_reachable()
    next_refresh = get_next_refresh_time()
    refresh = get_refresh_status()

    payload: dict[str, Any] = {
        "status": "ok" if database_ok else "degraded",
        "database": "connected" if database_ok else "disconnected",
        "scheduler": "running" if is_scheduler_running() else "stopped",
        "insights_refresh_running": refresh["running"],
        "insights_refresh_started_at": refresh["started_at"],
        "next_insights_refresh": next_refresh.isoformat() if next_refresh else None,
    }

    if not database_ok:
        return JSONResponse(status_code=503, content=payload)
    return payload
