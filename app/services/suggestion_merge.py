"""Merge of rule-based and AI suggestions for the today screen.

AI suggestions always come first in their given order.  Rule suggestions
fill the remaining slots unless they cover the same topic as one of the AI
suggestions, in which case the AI suggestion wins and the rule is dropped.

Topic overlap is decided by ``are_similar`` alone so the dedup policy can be
tuned without touching the ordering logic in ``merge_suggestions``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from typing import Protocol

from app.core.constants import (
    SIMILARITY_MIN_TOKEN_LENGTH,
    STOP_WORDS_EN,
    TOPIC_KEYWORDS,
)
from app.models.enums import SuggestionSource
from app.models.suggestion import AiInsightsResponse, Suggestion

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")


class SuggestionLike(Protocol):
    id: str
    title: str
    detail: str


def _tokenize(text: str) -> list[str]:
    """Lowercase, drop punctuation and split on whitespace."""
    return _NON_ALNUM.sub(" ", text.lower()).split()


def _suggestion_tokens(suggestion: SuggestionLike) -> list[str]:
    return _tokenize(f"{suggestion.title} {suggestion.detail}")


def detect_topic(suggestion: SuggestionLike) -> str | None:
    """Return the care topic a suggestion talks about, if any.

    A topic matches when one of its keywords prefixes a token of the
    combined title and detail ("temperature" matches "temp", "feeds"
    matches "feed").
    """
    tokens = _suggestion_tokens(suggestion)
    for topic, keywords in TOPIC_KEYWORDS.items():
        for token in tokens:
            if any(token.startswith(keyword) for keyword in keywords):
                return topic
    return None


def _content_words(suggestion: SuggestionLike) -> set[str]:
    return {
        token
        for token in _suggestion_tokens(suggestion)
        if len(token) >= SIMILARITY_MIN_TOKEN_LENGTH and token not in STOP_WORDS_EN
    }


def are_similar(first: SuggestionLike, second: SuggestionLike) -> bool:
    """Heuristic topical overlap between two suggestions.

    When both resolve to a care topic, they are similar only if the topics
    match.  Otherwise they are similar when they share a content word of at
    least four letters in their title + detail text.
    """
    first_topic = detect_topic(first)
    second_topic = detect_topic(second)
    if first_topic is not None and second_topic is not None:
        return first_topic == second_topic
    return bool(_content_words(first) & _content_words(second))


def _tag(suggestion: SuggestionLike, source: SuggestionSource) -> Suggestion:
    return Suggestion(
        id=suggestion.id,
        title=suggestion.title,
        detail=suggestion.detail,
        source=source,
    )


def merge_suggestions(
    rule_suggestions: Sequence[SuggestionLike],
    ai_response: AiInsightsResponse | None,
    max_count: int = 4,
) -> list[Suggestion]:
    """Combine rule and AI suggestions into one ranked, capped list.

    Parameters
    ----------
    rule_suggestions:
        Deterministic suggestions in the caller's priority order.  Never
        reordered.
    ai_response:
        Optional AI batch.  ``None`` or an empty batch yields the rules alone.
    max_count:
        Maximum number of suggestions returned.  Must be at least 1.

    Returns
    -------
    At most ``max_count`` suggestions: AI first, then the rule suggestions
    not similar to any AI suggestion.

    Raises
    ------
    ValueError
        If ``max_count`` is lower than 1.
    """
    if max_count < 1:
        raise ValueError(f"max_count must be a positive integer, got {max_count}")

    rules = [_tag(item, SuggestionSource.rule) for item in rule_suggestions]

    if ai_response is None or not ai_response.suggestions:
        return rules[:max_count]

    ai = [_tag(item, SuggestionSource.ai) for item in ai_response.suggestions]

    merged: list[Suggestion] = list(ai)
    dropped = 0
    for rule in rules:
        if any(are_similar(rule, item) for item in ai):
            dropped += 1
            continue
        merged.append(rule)

    logger.debug(
        "suggestions_merged",
        extra={
            "ai_count": len(ai),
            "rule_count": len(rules),
            "rules_deduplicated": dropped,
            "max_count": max_count,
        },
    )

    return merged[:max_count]
