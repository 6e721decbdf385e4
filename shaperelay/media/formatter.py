"""
Reply formatting.

Turns raw relay text into a reply payload: prose stays as content, image
links become embeds. A reply that is only a shared image collapses to a
clean attachment with no leftover URL line.
"""

import re

from shaperelay.bus.events import Embed, ReplyPayload
from shaperelay.media.resolver import TRAILING_PUNCTUATION, extract_image_urls
from shaperelay.media.signing import SignedLinkCache


def strip_urls(text: str, urls: list[str]) -> str:
    """
    Remove embedded URLs from text.

    Angle-bracket wrapped occurrences are removed everywhere; bare
    occurrences only when the URL stands alone on its line, along with any
    trailing punctuation extraction left off it. Remaining lines
    are trimmed and blank lines dropped.
    """
    trailing = f"[{re.escape(TRAILING_PUNCTUATION)}]*"
    for url in urls:
        escaped = re.escape(url)
        text = re.sub(f"<{escaped}>", "", text)
        text = re.sub(f"^[ \\t]*{escaped}{trailing}[ \\t]*$", "", text, flags=re.MULTILINE)

    lines = (line.strip() for line in text.split("\n"))
    return "\n".join(line for line in lines if line).strip()


class ReplyFormatter:
    """Builds reply payloads from relay output."""

    def __init__(self, link_cache: SignedLinkCache | None = None):
        self.link_cache = link_cache

    async def format(self, raw_text: str) -> ReplyPayload:
        """
        Format relay output for the chat channel.

        Args:
            raw_text: Text returned by the relay.

        Returns:
            ReplyPayload with content, embeds, or both.
        """
        if not isinstance(raw_text, str) or not raw_text.strip():
            return ReplyPayload(content=raw_text)

        image_urls = extract_image_urls(raw_text)
        if not image_urls:
            return ReplyPayload(content=raw_text)

        signed: dict[str, str] = {}
        if self.link_cache is not None:
            signed = await self.link_cache.resolve(image_urls)

        embeds = [Embed(url=signed.get(url, url)) for url in image_urls]
        cleaned = strip_urls(raw_text, image_urls)

        if not cleaned:
            return ReplyPayload(embeds=embeds)
        return ReplyPayload(content=cleaned, embeds=embeds)
