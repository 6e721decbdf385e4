"""
Detection tables for the bot classifier.

The tables are plain data so they can be tuned from configuration without
touching the classification logic:
- Indicator glyphs that automated replies start with
- Response patterns matching this relay's own replies and common bot templates
- Name patterns matching automated account names
"""

import re
from dataclasses import dataclass, field


DEFAULT_INDICATOR_GLYPHS: list[str] = [
    "🤖",
    "🔧",
    "⚙️",
    "🚀",
    "✅",
    "❌",
    "⚠️",
    "📊",
    "💡",
]

DEFAULT_RESPONSE_PATTERNS: list[str] = [
    r"^(hello!? i am now active|i am already active|i am not active|i am no longer active)",
    r"^(to activate me, please use|the command has been sent to)",
    r"^(sorry, (?:the|there was))",
    r"^(too many requests)",
    r"^(oops, something went wrong)",
    r"^(\*\*\w+\*\* didn't provide)",
    r"^\w+ has been (activated|deactivated|reset)",
    r"^(processing|generating|thinking)",
    r"^(error:|warning:|info:)",
    r"^\[.*\]",  # [System] style prefixes
]

DEFAULT_NAME_PATTERNS: list[str] = [
    r"bot$",
    r"^bot",
    r"-bot$",
    r"_bot$",
    r"ai$",
    r"^ai-",
    r"assistant",
    r"helper",
    r"service",
    r"automated",
    r"system",
]


@dataclass
class DetectionPatterns:
    """Compiled detection tables."""
    indicator_glyphs: tuple[str, ...]
    response_patterns: list[re.Pattern] = field(default_factory=list)
    name_patterns: list[re.Pattern] = field(default_factory=list)

    @classmethod
    def build(
        cls,
        indicator_glyphs: list[str] | None = None,
        response_patterns: list[str] | None = None,
        name_patterns: list[str] | None = None,
        target_name: str = "",
    ) -> "DetectionPatterns":
        """
        Compile detection tables, falling back to the defaults.

        Args:
            indicator_glyphs: Leading glyphs that mark automated content.
            response_patterns: Regexes matched against message content.
            name_patterns: Regexes matched against lower-cased author names.
            target_name: Relay persona name; authors whose name starts with
                it are treated as automated.

        Returns:
            DetectionPatterns ready for matching.
        """
        glyphs = indicator_glyphs if indicator_glyphs is not None else DEFAULT_INDICATOR_GLYPHS
        responses = response_patterns if response_patterns is not None else DEFAULT_RESPONSE_PATTERNS
        names = list(name_patterns if name_patterns is not None else DEFAULT_NAME_PATTERNS)

        if target_name:
            names.append("^" + re.escape(target_name.lower()))

        return cls(
            indicator_glyphs=tuple(g for g in glyphs if g),
            response_patterns=[re.compile(p, re.IGNORECASE) for p in responses],
            name_patterns=[re.compile(p, re.IGNORECASE) for p in names],
        )
