"""Event types for inbound chat messages and outbound replies."""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class AuthorKind(str, Enum):
    """Author type as reported by the chat platform."""
    HUMAN = "human"
    BOT = "bot"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Author:
    """The author of a chat message."""
    id: str
    name: str = ""
    display_name: str | None = None
    kind: AuthorKind = AuthorKind.UNKNOWN

    @property
    def names(self) -> tuple[str, ...]:
        """Non-empty names the author is known by."""
        return tuple(n for n in (self.name, self.display_name) if n)

    @property
    def label(self) -> str:
        """Best human-readable name for logs and prompts."""
        return self.name or self.display_name or "Unknown User"


@dataclass(frozen=True)
class InboundMessage:
    """Message received from a chat channel."""
    author: Author
    channel_id: str
    content: str
    guild_id: str | None = None
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True)
class Embed:
    """A rich image attachment."""
    url: str

    def to_dict(self) -> dict[str, Any]:
        return {"image": {"url": self.url}}


@dataclass
class ReplyPayload:
    """
    Structured reply sent back to a chat channel.

    Either field may be absent: a reply made only of shared images carries
    embeds and no content.
    """
    content: str | None = None
    embeds: list[Embed] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.content and not self.embeds

    def to_dict(self) -> dict[str, Any]:
        """Convert to the platform payload shape, omitting absent fields."""
        data: dict[str, Any] = {}
        if self.content is not None:
            data["content"] = self.content
        if self.embeds:
            data["embeds"] = [embed.to_dict() for embed in self.embeds]
        return data
