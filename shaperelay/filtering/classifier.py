"""
Automated-author classifier.

Decides whether a message author is a bot using, in order:
1. Allow-list (never a bot)
2. Known bot registry
3. Platform-reported author type
4. Leading indicator glyphs
5. Response patterns typical of automated replies
6. Account naming patterns

Checks 3-6 are pure predicates. Recording a positive verdict in the
registry happens in one place, ``BotClassifier.classify``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from loguru import logger

from shaperelay.bus.events import AuthorKind, InboundMessage
from shaperelay.filtering.allowlist import AllowList
from shaperelay.filtering.patterns import DetectionPatterns
from shaperelay.filtering.registry import KnownBotRegistry


class DetectionReason(str, Enum):
    """Why an author was classified as automated."""
    KNOWN = "known"
    AUTHOR_TYPE = "author_type"
    INDICATOR_GLYPH = "indicator_glyph"
    RESPONSE_PATTERN = "response_pattern"
    NAME_PATTERN = "name_pattern"
    RAPID_FIRE = "rapid_fire"
    RELAY_FLAGGED = "relay_flagged"


@dataclass(frozen=True)
class Classification:
    """Result of classifying a message author."""
    is_automated: bool
    reason: DetectionReason | None = None


HUMAN = Classification(is_automated=False)

Predicate = Callable[[InboundMessage, DetectionPatterns], bool]


def is_bot_author_type(message: InboundMessage, patterns: DetectionPatterns) -> bool:
    return message.author.kind == AuthorKind.BOT


def starts_with_indicator(message: InboundMessage, patterns: DetectionPatterns) -> bool:
    content = (message.content or "").strip()
    return any(content.startswith(glyph) for glyph in patterns.indicator_glyphs)


def matches_response_pattern(message: InboundMessage, patterns: DetectionPatterns) -> bool:
    content = (message.content or "").strip()
    return any(p.search(content) for p in patterns.response_patterns)


def matches_name_pattern(message: InboundMessage, patterns: DetectionPatterns) -> bool:
    names = [n.lower() for n in message.author.names]
    return any(p.search(name) for p in patterns.name_patterns for name in names)


DEFAULT_PREDICATES: list[tuple[DetectionReason, Predicate]] = [
    (DetectionReason.AUTHOR_TYPE, is_bot_author_type),
    (DetectionReason.INDICATOR_GLYPH, starts_with_indicator),
    (DetectionReason.RESPONSE_PATTERN, matches_response_pattern),
    (DetectionReason.NAME_PATTERN, matches_name_pattern),
]


class BotClassifier:
    """
    Heuristic classifier for automated authors.

    Positive verdicts are recorded in the known bot registry, so once an
    author is caught every later message short-circuits on the registry
    check without re-evaluating content.
    """

    def __init__(
        self,
        registry: KnownBotRegistry,
        allow_list: AllowList,
        patterns: DetectionPatterns | None = None,
        predicates: list[tuple[DetectionReason, Predicate]] | None = None,
    ):
        self.registry = registry
        self.allow_list = allow_list
        self.patterns = patterns or DetectionPatterns.build()
        self.predicates = predicates if predicates is not None else DEFAULT_PREDICATES

    def classify(self, message: InboundMessage) -> Classification:
        """
        Classify the author of a message.

        Args:
            message: The inbound message.

        Returns:
            Classification with the matching reason, if any.
        """
        author = message.author

        if self.allow_list.allows_author(author):
            logger.debug(f"[Allow-list] {author.label} is allow-listed")
            return HUMAN

        if author.id in self.registry:
            logger.debug(f"[Bot Filter] Known bot detected: {author.label} (ID: {author.id})")
            return Classification(True, DetectionReason.KNOWN)

        for reason, predicate in self.predicates:
            if predicate(message, self.patterns):
                self.registry.add(author.id)
                logger.info(
                    f"[Bot Filter] {reason.value} match for {author.label} (ID: {author.id})"
                )
                return Classification(True, reason)

        return HUMAN
