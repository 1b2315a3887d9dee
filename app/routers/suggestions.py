"""Suggestion endpoints.

POST /api/v1/suggestions/merge merges caller-supplied rule and AI
suggestions; GET /api/v1/babies/{baby_id}/suggestions builds both sides
from stored logs and today's AI insights.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query

from app.models.suggestion import MergeSuggestionsRequest, SuggestionsResponse
from app.services.ai_insights import parse_ai_insights_response
from app.services.suggestion_merge import merge_suggestions
from app.services.today import build_suggestions

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/suggestions/merge", response_model=SuggestionsResponse)
async def merge_suggestions_endpoint(
    body: MergeSuggestionsRequest,
) -> SuggestionsResponse:
    """Merge rule and AI suggestions into one ranked, capped list.

    A malformed ``ai_response`` is treated as unavailable, so the rule
    suggestions are returned alone.
    """
    ai_response = None
    if body.ai_response is not None:
        ai_response = parse_ai_insights_response(body.ai_response)
        if ai_response is None:
            logger.warning("ai_response_rejected", extra={"keys": sorted(body.ai_response)})

    merged = merge_suggestions(body.rule_suggestions, ai_response, body.max_count)
    return SuggestionsResponse(
        suggestions=merged,
        ai_available=bool(ai_response and ai_response.suggestions),
        date=ai_response.date if ai_response else None,
    )


@router.get("/babies/{baby_id}/suggestions", response_model=SuggestionsResponse)
async def baby_suggestions(
    baby_id: str,
    max_count: int | None = Query(
        default=None,
        ge=1,
        le=20,
        description="Maximum suggestions returned (default from settings)",
    ),
) -> SuggestionsResponse:
    """Return today's merged suggestions for a baby.

    AI insights are best effort: when unavailable the rule suggestions are
    returned alone.
    """
    try:
        return await build_suggestions(baby_id, max_count=max_count)
    except RuntimeError as exc:
        logger.error(
            "baby_suggestions_failed",
            extra={"baby_id": baby_id, "error_message": str(exc)},
        )
        raise HTTPException(
            status_code=503,
            detail=f"Failed to build suggestions: {exc}",
        ) from exc
