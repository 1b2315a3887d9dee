"""Smart alert endpoints.

POST /api/v1/alerts/evaluate runs the evaluator on a caller-supplied
snapshot; GET /api/v1/babies/{baby_id}/alerts evaluates stored logs
against the baby's stored thresholds.
"""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, HTTPException, Query

from app.models.alert import AlertsResponse, EvaluateAlertsRequest
from app.models.enums import TemperatureUnit
from app.services.alerts import evaluate_alerts
from app.services.today import build_alerts

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/alerts/evaluate", response_model=AlertsResponse)
async def evaluate_alerts_endpoint(body: EvaluateAlertsRequest) -> AlertsResponse:
    """Evaluate smart alerts over the supplied logs and thresholds."""
    try:
        alerts = evaluate_alerts(
            latest_feed=body.latest_feed,
            latest_temperature=body.latest_temperature,
            latest_diaper=body.latest_diaper,
            feeds_in_trailing_24h=body.feeds_in_trailing_24h,
            medication_history=body.medication_history,
            thresholds=body.thresholds,
            now=body.now,
            temperature_unit=body.temperature_unit,
        )
    except (TypeError, ValueError) as exc:
        # Mixed naive/aware timestamps or unparsable ISO strings
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return AlertsResponse(alerts=alerts, evaluated_at=body.now)


@router.get("/babies/{baby_id}/alerts", response_model=AlertsResponse)
async def baby_alerts(
    baby_id: str,
    now: datetime | None = Query(
        default=None,
        description="Evaluation instant (ISO 8601, default: current time)",
    ),
    temperature_unit: TemperatureUnit | None = Query(
        default=None,
        description="Display unit for temperatures (default: stored setting)",
    ),
) -> AlertsResponse:
    """Return the smart alerts currently active for a baby."""
    try:
        return build_alerts(baby_id, now=now, temperature_unit=temperature_unit)
    except RuntimeError as exc:
        logger.error(
            "baby_alerts_failed",
            extra={"baby_id": baby_id, "error_message": str(exc)},
        )
        raise HTTPException(
            status_code=503,
            detail=f"Failed to evaluate alerts: {exc}",
        ) from exc
