"""Application constants.

Topic keywords and stop words used by suggestion deduplication, plus the
smart-alert defaults and the bounds enforced when settings are loaded.
"""

MS_PER_HOUR: int = 3_600_000

# ---------------------------------------------------------------------------
# Suggestion similarity
# ---------------------------------------------------------------------------
SIMILARITY_MIN_TOKEN_LENGTH: int = 4

# Maps each care topic to word prefixes that identify it in free text.
# Order matters: the first topic with a hit wins.
TOPIC_KEYWORDS: dict[str, list[str]] = {
    "temperature": ["temp", "fever"],
    "feeding": ["feed", "bottle", "formula", "nursing"],
    "diaper": ["diaper", "pee", "poop", "nappy"],
    "medication": ["medic", "dose", "dosing"],
    "growth": ["milestone", "growth", "weight"],
}

# Common English words that carry no topical signal.
STOP_WORDS_EN: set[str] = {
    "about", "after", "again", "also", "around", "baby", "been", "before",
    "being", "check", "could", "daily", "each", "entries", "every", "from",
    "have", "help", "into", "just", "keep", "last", "like", "logged",
    "logs", "more", "most", "much", "need", "next", "only", "over",
    "recent", "recently", "should", "some", "than", "that", "their",
    "them", "then", "there", "these", "they", "this", "today", "very",
    "watch", "were", "what", "when", "will", "with", "your",
}

# ---------------------------------------------------------------------------
# Smart alert defaults and accepted ranges
# ---------------------------------------------------------------------------
DEFAULT_ALERTS_ENABLED: bool = True
DEFAULT_FEED_GAP_HOURS: float = 4.5
DEFAULT_DIAPER_GAP_HOURS: float = 8.0
DEFAULT_FEVER_THRESHOLD_C: float = 38.0
DEFAULT_LOW_FEEDS_PER_DAY: int = 6

FEED_GAP_HOURS_RANGE: tuple[float, float] = (0.5, 24.0)
DIAPER_GAP_HOURS_RANGE: tuple[float, float] = (1.0, 48.0)
FEVER_THRESHOLD_C_RANGE: tuple[float, float] = (35.0, 43.0)
LOW_FEEDS_PER_DAY_RANGE: tuple[int, int] = (1, 30)

# ---------------------------------------------------------------------------
# Routine suggestions
# ---------------------------------------------------------------------------
HIGH_TEMPERATURE_C: float = 38.0
ROUTINE_SUGGESTIONS_MAX: int = 4

# ---------------------------------------------------------------------------
# AI insights
# ---------------------------------------------------------------------------
AI_SUGGESTIONS_MAX: int = 4
AI_TITLE_MAX_LENGTH: int = 60
AI_DETAIL_MAX_LENGTH: int = 220
AI_DETAIL_FALLBACK: str = "Informational only. Not medical advice."
AI_PROMPT_MAX_CHARS: int = 5000
AI_LOOKBACK_DAYS: int = 14
