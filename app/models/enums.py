"""Enum types mirroring the value sets used by the mobile app records."""

from enum import Enum


class SuggestionSource(str, Enum):
    """Origin of a suggestion shown on the today screen."""
    rule = "rule"
    ai = "ai"


class AlertLevel(str, Enum):
    """Severity of a smart alert."""
    warning = "warning"
    critical = "critical"


class FeedType(str, Enum):
    """Kind of feed recorded."""
    breast = "breast"
    bottle = "bottle"
    formula = "formula"
    solids = "solids"


class FeedSide(str, Enum):
    """Breast side used for a feed."""
    left = "left"
    right = "right"
    both = "both"
    none = "none"


class PoopSize(str, Enum):
    small = "small"
    medium = "medium"
    large = "large"


class MedicationDoseUnit(str, Enum):
    ml = "ml"
    mg = "mg"
    drops = "drops"
    tablet = "tablet"


class TemperatureUnit(str, Enum):
    """Display unit for temperatures (storage is always Celsius)."""
    c = "c"
    f = "f"
