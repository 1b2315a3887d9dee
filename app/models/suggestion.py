"""Pydantic models for today-screen suggestions.

Covers the rule/AI suggestion records, the AI daily insights payload
(``daily_ai_insights`` table) and the API request/response contracts.
"""

from datetime import date as Date
from typing import Any

from pydantic import BaseModel, Field

from app.models.enums import SuggestionSource


class Suggestion(BaseModel):
    """A single suggestion shown to the user."""
    id: str
    title: str
    detail: str
    source: SuggestionSource = SuggestionSource.rule


class RoutineSuggestion(BaseModel):
    """A rule suggestion before it is tagged with a source."""
    id: str
    title: str
    detail: str


class AiInsightsResponse(BaseModel):
    """AI-suggested entries for a calendar date.

    ``cached`` is informational only; it never affects merging.
    """
    date: Date
    cached: bool = False
    suggestions: list[Suggestion] = []


class DailyInsightUpsert(BaseModel):
    """Payload for upserting a ``daily_ai_insights`` row."""
    user_id: str | None = None
    baby_id: str
    date: Date
    payload_json: dict[str, Any]


class MergeSuggestionsRequest(BaseModel):
    """Body for POST /api/v1/suggestions/merge."""
    rule_suggestions: list[RoutineSuggestion] = []
    # Raw AI payload, validated by the router; malformed batches are ignored.
    ai_response: dict[str, Any] | None = None
    max_count: int = Field(default=4, ge=1)


class SuggestionsResponse(BaseModel):
    """Merged suggestion list returned by the suggestion endpoints."""
    suggestions: list[Suggestion] = []
    ai_available: bool = False
    date: Date | None = None
