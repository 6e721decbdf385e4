"""
Self-loop prevention for ShapeRelay.

Provides:
- Allow-list of exempt identities
- Known bot registry with durable write-through
- Heuristic automated-author classifier
- Per-channel rapid-fire detection
"""

from shaperelay.filtering.allowlist import AllowList
from shaperelay.filtering.registry import KnownBotRegistry
from shaperelay.filtering.patterns import (
    DetectionPatterns,
    DEFAULT_INDICATOR_GLYPHS,
    DEFAULT_RESPONSE_PATTERNS,
    DEFAULT_NAME_PATTERNS,
)
from shaperelay.filtering.classifier import (
    BotClassifier,
    Classification,
    DetectionReason,
)
from shaperelay.filtering.rate import RateWindowTracker

__all__ = [
    "AllowList",
    "KnownBotRegistry",
    "DetectionPatterns",
    "DEFAULT_INDICATOR_GLYPHS",
    "DEFAULT_RESPONSE_PATTERNS",
    "DEFAULT_NAME_PATTERNS",
    "BotClassifier",
    "Classification",
    "DetectionReason",
    "RateWindowTracker",
]
