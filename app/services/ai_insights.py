"""AI daily insights: generation, caching and validation.

Builds a compact 14-day aggregate of a baby's logs, asks an
OpenAI-compatible chat endpoint for 3-4 short care suggestions, and caches
the result per baby and date in the ``daily_ai_insights`` table.

AI suggestions are best effort.  Every failure (missing baby, no API key,
network error, malformed model output, storage error) degrades to an empty
batch or ``None`` so the today screen falls back to rule suggestions.
"""

from __future__ import annotations

import json
import logging
from collections import defaultdict
from datetime import date as Date
from datetime import datetime, time, timedelta, timezone
from typing import Any

import httpx
from pydantic import ValidationError

from app.core.config import settings
from app.core.constants import (
    AI_DETAIL_FALLBACK,
    AI_DETAIL_MAX_LENGTH,
    AI_LOOKBACK_DAYS,
    AI_PROMPT_MAX_CHARS,
    AI_SUGGESTIONS_MAX,
    AI_TITLE_MAX_LENGTH,
    HIGH_TEMPERATURE_C,
)
from app.db.supabase import get_supabase
from app.models.enums import SuggestionSource
from app.models.logs import (
    DiaperLog,
    FeedEvent,
    MedicationLog,
    MilestoneLog,
    TemperatureLog,
)
from app.models.suggestion import AiInsightsResponse, DailyInsightUpsert, Suggestion
from app.services.logs import (
    list_diapers,
    list_feeds,
    list_medications,
    list_milestones,
    list_temperatures,
)

logger = logging.getLogger(__name__)

INSIGHTS_TABLE = "daily_ai_insights"

INSIGHTS_SYSTEM_PROMPT = (
    "You generate 3-4 concise baby-care suggestions from aggregates only. "
    "Informational only, not medical advice. Never diagnose. "
    "Consider age context when present and tune routine/milestone expectations "
    "accordingly. If fever pattern appears, suggest contacting pediatric care. "
    'Return strict JSON: {"suggestions":[{"title":"...","detail":"..."}]}'
)


# ---------------------------------------------------------------------------
# Payload validation
# ---------------------------------------------------------------------------


def _is_suggestion_payload(value: Any) -> bool:
    if not isinstance(value, dict):
        return False
    return (
        isinstance(value.get("id"), str)
        and isinstance(value.get("title"), str)
        and isinstance(value.get("detail"), str)
        and value.get("source") in (SuggestionSource.ai.value, SuggestionSource.rule.value)
    )


def parse_ai_insights_response(payload: Any) -> AiInsightsResponse | None:
    """Validate an externally produced insights payload.

    Returns ``None`` unless *payload* has a string ``date``, a boolean
    ``cached`` and a list of well-formed suggestions.
    """
    if not isinstance(payload, dict):
        return None
    if not isinstance(payload.get("date"), str):
        return None
    if not isinstance(payload.get("cached"), bool):
        return None
    suggestions = payload.get("suggestions")
    if not isinstance(suggestions, list):
        return None
    if not all(_is_suggestion_payload(item) for item in suggestions):
        return None

    try:
        return AiInsightsResponse.model_validate(payload)
    except ValidationError:
        return None


def _clip(value: Any, max_length: int, fallback: str) -> str:
    if not isinstance(value, str):
        return fallback
    return value.strip()[:max_length] or fallback


def sanitize_ai_suggestions(raw: Any) -> list[Suggestion]:
    """Coerce raw model output items into at most four AI suggestions.

    Ids are reassigned (``ai-1``, ``ai-2``...) and text is trimmed to the
    display limits, with fallbacks for missing fields.
    """
    if not isinstance(raw, list):
        return []

    suggestions: list[Suggestion] = []
    for index, item in enumerate(raw[:AI_SUGGESTIONS_MAX], start=1):
        obj = item if isinstance(item, dict) else {}
        suggestions.append(
            Suggestion(
                id=f"ai-{index}",
                title=_clip(obj.get("title"), AI_TITLE_MAX_LENGTH, f"Insight {index}"),
                detail=_clip(obj.get("detail"), AI_DETAIL_MAX_LENGTH, AI_DETAIL_FALLBACK),
                source=SuggestionSource.ai,
            )
        )
    return suggestions


def parse_llm_content(content: str) -> list[Suggestion]:
    """Parse the chat completion content into sanitized suggestions.

    Markdown code fences around the JSON are tolerated.  Anything that is
    not a JSON object yields an empty list.
    """
    clean_content = content.strip()
    if clean_content.startswith("```"):
        lines = clean_content.split("\n")
        lines = [line for line in lines if not line.strip().startswith("```")]
        clean_content = "\n".join(lines).strip()

    try:
        parsed = json.loads(clean_content)
    except json.JSONDecodeError:
        return []
    if not isinstance(parsed, dict):
        return []
    return sanitize_ai_suggestions(parsed.get("suggestions"))


# ---------------------------------------------------------------------------
# Aggregate payload
# ---------------------------------------------------------------------------


def get_age_context(birthdate: str | None, target: Date) -> dict[str, Any] | None:
    """Age of the baby at noon UTC on *target*, or ``None`` if unknown."""
    if not birthdate:
        return None
    try:
        birth = datetime.fromisoformat(birthdate.replace("Z", "+00:00"))
    except ValueError:
        return None
    if birth.tzinfo is None:
        birth = birth.replace(tzinfo=timezone.utc)

    noon = datetime.combine(target, time(12, 0), tzinfo=timezone.utc)
    age_days = (noon - birth).days
    if age_days < 0:
        return None

    if age_days <= 56:
        phase = "newborn"
    elif age_days <= 365:
        phase = "infant"
    elif age_days <= 1095:
        phase = "toddler"
    else:
        phase = "child"

    return {
        "age_days": age_days,
        "age_weeks": age_days // 7,
        "age_months_approx": int(age_days / 30.4375),
        "phase": phase,
    }


def build_insights_payload(
    baby: dict[str, Any],
    target: Date,
    feeds: list[FeedEvent],
    diapers: list[DiaperLog],
    temperatures: list[TemperatureLog],
    medications: list[MedicationLog],
    milestones: list[MilestoneLog],
) -> dict[str, Any]:
    """Aggregate newest-first logs into the compact prompt payload.

    Per-day series keep the last 7 days, medications the last 6 entries and
    milestones the last 4.
    """
    feed_days: dict[str, dict[str, float]] = defaultdict(
        lambda: {"count": 0, "total_ml": 0.0}
    )
    for feed in feeds:
        day = feed.timestamp[:10]
        feed_days[day]["count"] += 1
        feed_days[day]["total_ml"] += feed.amount_ml or 0.0

    diaper_days: dict[str, int] = defaultdict(int)
    for diaper in diapers:
        diaper_days[diaper.timestamp[:10]] += 1

    age = get_age_context(baby.get("birthdate"), target) or {}

    return {
        "date": target.isoformat(),
        "baby": {
            "name": baby.get("name"),
            "birthdate": baby.get("birthdate"),
            "age_days": age.get("age_days"),
            "age_weeks": age.get("age_weeks"),
            "age_months_approx": age.get("age_months_approx"),
            "phase": age.get("phase"),
        },
        "feed_counts_by_day": [
            {
                "day": day,
                "count": int(values["count"]),
                "total_ml": round(values["total_ml"], 1),
            }
            for day, values in sorted(feed_days.items())[-7:]
        ],
        "diaper_counts_by_day": [
            {"day": day, "count": count}
            for day, count in sorted(diaper_days.items())[-7:]
        ],
        "temperature": {
            "high_temp_count": sum(
                1 for t in temperatures if t.temperature_c >= HIGH_TEMPERATURE_C
            ),
            "latest_c": temperatures[0].temperature_c if temperatures else None,
        },
        "medications": [
            {
                "timestamp": med.timestamp,
                "name": med.medication_name,
                "min_interval_hours": med.min_interval_hours,
            }
            for med in medications[:6]
        ],
        "milestones": [
            {"timestamp": milestone.timestamp, "title": milestone.title}
            for milestone in milestones[:4]
        ],
    }


# ---------------------------------------------------------------------------
# LLM call
# ---------------------------------------------------------------------------


def _completions_url() -> str:
    if settings.LLM_PROVIDER == "openai":
        return "https://api.openai.com/v1/chat/completions"
    return f"https://api.{settings.LLM_PROVIDER}.com/v1/chat/completions"


async def request_ai_suggestions(payload: dict[str, Any]) -> list[Suggestion]:
    """Ask the LLM for suggestions about *payload*.

    Returns an empty list when no API key is configured or the call fails.
    """
    if not settings.LLM_API_KEY:
        return []

    prompt = json.dumps(payload, ensure_ascii=False)[:AI_PROMPT_MAX_CHARS]

    try:
        async with httpx.AsyncClient(timeout=settings.LLM_TIMEOUT_SECONDS) as client:
            response = await client.post(
                _completions_url(),
                headers={
                    "Authorization": f"Bearer {settings.LLM_API_KEY}",
                    "Content-Type": "application/json",
                },
                json={
                    "model": settings.LLM_MODEL,
                    "temperature": 0.2,
                    "max_tokens": 220,
                    "response_format": {"type": "json_object"},
                    "messages": [
                        {"role": "system", "content": INSIGHTS_SYSTEM_PROMPT},
                        {
                            "role": "user",
                            "content": (
                                "Analyze this daily baby aggregate payload and "
                                f"return actionable suggestions:\n{prompt}"
                            ),
                        },
                    ],
                },
            )
            response.raise_for_status()
            data = response.json()
            content = data["choices"][0]["message"]["content"] or ""
    except (httpx.HTTPError, json.JSONDecodeError, KeyError, IndexError, TypeError) as exc:
        logger.warning(
            "ai_insights_llm_failed",
            extra={
                "error_type": type(exc).__name__,
                "error_message": str(exc),
            },
        )
        return []

    return parse_llm_content(content)


# ---------------------------------------------------------------------------
# Cached daily insights
# ---------------------------------------------------------------------------


def _get_baby(baby_id: str) -> dict[str, Any] | None:
    client = get_supabase()
    result = (
        client.table("babies")
        .select("id, user_id, name, birthdate")
        .eq("id", baby_id)
        .is_("deleted_at", "null")
        .limit(1)
        .execute()
    )
    return result.data[0] if result.data else None


def _get_cached_payload(baby_id: str, target: Date) -> dict[str, Any] | None:
    client = get_supabase()
    result = (
        client.table(INSIGHTS_TABLE)
        .select("payload_json")
        .eq("baby_id", baby_id)
        .eq("date", target.isoformat())
        .limit(1)
        .execute()
    )
    if not result.data:
        return None
    payload = result.data[0].get("payload_json")
    return payload if isinstance(payload, dict) else None


def _store_payload(baby: dict[str, Any], target: Date, suggestions: list[Suggestion]) -> None:
    row = DailyInsightUpsert(
        user_id=baby.get("user_id"),
        baby_id=baby["id"],
        date=target,
        payload_json={
            "suggestions": [
                {"title": item.title, "detail": item.detail} for item in suggestions
            ]
        },
    )
    client = get_supabase()
    client.table(INSIGHTS_TABLE).upsert(
        row.model_dump(mode="json"),
        on_conflict="user_id,baby_id,date",
    ).execute()


async def generate_daily_insights(baby_id: str, target: Date) -> AiInsightsResponse | None:
    """Return the cached insights for *target* or generate and cache them.

    Returns ``None`` when the baby does not exist.  Storage errors propagate
    to the caller.
    """
    baby = _get_baby(baby_id)
    if baby is None:
        return None

    cached_payload = _get_cached_payload(baby_id, target)
    if cached_payload is not None:
        return AiInsightsResponse(
            date=target,
            cached=True,
            suggestions=sanitize_ai_suggestions(cached_payload.get("suggestions")),
        )

    day_end = datetime.combine(target, time.max, tzinfo=timezone.utc)
    lookback_start = datetime.combine(
        target - timedelta(days=AI_LOOKBACK_DAYS), time.min, tzinfo=timezone.utc
    )

    payload = build_insights_payload(
        baby,
        target,
        feeds=list_feeds(baby_id, lookback_start, day_end, limit=400),
        diapers=list_diapers(baby_id, lookback_start, day_end, limit=400),
        temperatures=list_temperatures(baby_id, lookback_start, day_end, limit=200),
        medications=list_medications(baby_id, lookback_start, day_end, limit=200),
        milestones=list_milestones(baby_id, lookback_start, day_end, limit=20),
    )

    suggestions = await request_ai_suggestions(payload)
    _store_payload(baby, target, suggestions)

    logger.info(
        "ai_insights_generated",
        extra={
            "baby_id": baby_id,
            "date": target.isoformat(),
            "suggestion_count": len(suggestions),
        },
    )

    return AiInsightsResponse(date=target, cached=False, suggestions=suggestions)


async def get_daily_insights(
    baby_id: str,
    target: Date | None = None,
) -> AiInsightsResponse | None:
    """Best-effort wrapper around ``generate_daily_insights``.

    Any failure is logged and reported as ``None`` so callers can fall back
    to rule suggestions only.
    """
    target = target or datetime.now(timezone.utc).date()
    try:
        return await generate_daily_insights(baby_id, target)
    except Exception as exc:
        logger.warning(
            "ai_insights_unavailable",
            extra={
                "baby_id": baby_id,
                "date": target.isoformat(),
                "error_type": type(exc).__name__,
                "error_message": str(exc),
            },
        )
        return None
