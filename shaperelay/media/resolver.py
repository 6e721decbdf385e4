"""
Media URL extraction and classification.

Relay replies reference images as plain links, either bare or wrapped in
angle brackets (link-preview suppressed). This module finds those links
and classifies them by file extension.
"""

import re
from enum import Enum
from typing import Iterable
from urllib.parse import urlsplit


class MediaType(str, Enum):
    """Kinds of media recognised in URLs."""
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    NONE = "none"


MEDIA_EXTENSIONS: dict[MediaType, tuple[str, ...]] = {
    MediaType.IMAGE: (".png", ".jpg", ".jpeg", ".gif", ".webp", ".bmp"),
    MediaType.VIDEO: (".mp4", ".webm", ".mov"),
    MediaType.AUDIO: (".mp3", ".ogg", ".wav"),
}

WRAPPED_URL_PATTERN = re.compile(r"<([a-zA-Z][a-zA-Z0-9+.\-]*://[^>\s]+)>")
BARE_URL_PATTERN = re.compile(r"[a-zA-Z][a-zA-Z0-9+.\-]*://[^\s<>\"{}|\\^`\[\]]+")

# Punctuation that ends a sentence rather than a URL
TRAILING_PUNCTUATION = ".,;:!?)'"


def classify(url: str) -> MediaType:
    """
    Classify a URL by the extension of its path.

    Args:
        url: Absolute URL.

    Returns:
        The media type, or MediaType.NONE for non-http(s) URLs and
        unrecognised extensions.
    """
    if not isinstance(url, str):
        return MediaType.NONE

    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return MediaType.NONE

    if parts.scheme.lower() not in ("http", "https") or not parts.netloc:
        return MediaType.NONE

    path = parts.path.lower()
    for media_type, extensions in MEDIA_EXTENSIONS.items():
        if path.endswith(extensions):
            return media_type
    return MediaType.NONE


def find_urls(text: str) -> list[str]:
    """
    Find every URL in text, in order of first appearance.

    Each line is scanned for angle-bracket wrapped URLs first, then for
    bare URLs. Duplicates are dropped.
    """
    if not isinstance(text, str):
        return []

    seen: dict[str, None] = {}
    for line in text.split("\n"):
        for match in WRAPPED_URL_PATTERN.finditer(line):
            seen.setdefault(match.group(1), None)
        for match in BARE_URL_PATTERN.finditer(line):
            url = match.group(0).rstrip(TRAILING_PUNCTUATION)
            if url:
                seen.setdefault(url, None)
    return list(seen)


def extract_media_urls(text: str, kinds: Iterable[MediaType]) -> list[str]:
    """Extract URLs of the given media kinds from text."""
    wanted = set(kinds)
    return [url for url in find_urls(text) if classify(url) in wanted]


def extract_image_urls(text: str) -> list[str]:
    """
    Extract image URLs from text.

    Example:
        >>> extract_image_urls("<http://x/a.png>\\nhttp://x/a.png\\nhttp://x/b.txt")
        ['http://x/a.png']
    """
    return extract_media_urls(text, (MediaType.IMAGE,))
