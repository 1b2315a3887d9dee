"""Single-run guard for the insights refresh.

A ``threading.Lock`` acquired without blocking: a second trigger (scheduler
tick or manual POST) sees the refresh as busy and skips or answers 409.
The id and start time of the active run are kept for the health endpoint.
"""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

_refresh_lock = threading.Lock()
_active_run: dict[str, Any] = {}


def acquire_refresh_lock(run_id: UUID) -> bool:
    """Claim the refresh for *run_id*; False when another run holds it."""
    if not _refresh_lock.acquire(blocking=False):
        return False
    _active_run.update(run_id=run_id, started_at=datetime.now(timezone.utc))
    return True


def release_refresh_lock() -> None:
    """Free the refresh.  Releasing an unheld lock is a no-op."""
    _active_run.clear()
    if _refresh_lock.locked():
        _refresh_lock.release()


def get_current_run_id() -> UUID | None:
    return _active_run.get("run_id")


def is_refresh_running() -> bool:
    return "run_id" in _active_run


def get_refresh_status() -> dict[str, Any]:
    """Snapshot of the active run for status reporting."""
    started_at: datetime | None = _active_run.get("started_at")
    run_id = _active_run.get("run_id")
    return {
        "running": run_id is not None,
        "run_id": str(run_id) if run_id else None,
        "started_at": started_at.isoformat() if started_at else None,
    }
