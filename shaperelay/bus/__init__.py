"""Message types shared between the chat channel and the relay core."""

from shaperelay.bus.events import (
    Author,
    AuthorKind,
    InboundMessage,
    Embed,
    ReplyPayload,
)

__all__ = [
    "Author",
    "AuthorKind",
    "InboundMessage",
    "Embed",
    "ReplyPayload",
]
