"""
Media handling for relay replies.

Provides:
- Media URL extraction and classification
- Signed URL resolution with TTL caching
- Reply formatting into content and embeds
"""

from shaperelay.media.resolver import (
    MediaType,
    classify,
    find_urls,
    extract_media_urls,
    extract_image_urls,
)
from shaperelay.media.signing import (
    LinkSigner,
    LinkSigningError,
    SignedLinkCache,
    SignedLinkEntry,
    DiscordLinkSigner,
)
from shaperelay.media.formatter import ReplyFormatter, strip_urls

__all__ = [
    "MediaType",
    "classify",
    "find_urls",
    "extract_media_urls",
    "extract_image_urls",
    "LinkSigner",
    "LinkSigningError",
    "SignedLinkCache",
    "SignedLinkEntry",
    "DiscordLinkSigner",
    "ReplyFormatter",
    "strip_urls",
]
