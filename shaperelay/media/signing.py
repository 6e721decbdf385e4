"""
Signed URL resolution for platform-hosted assets.

Discord attachment links expire. Before a reply embeds one, the link is
exchanged for a freshly signed URL through the platform's refresh endpoint.
Signed URLs are cached for slightly less than the platform's own expiry so
a cached link never expires while a message is being delivered.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Protocol
from urllib.parse import urlsplit

import httpx
from loguru import logger


class LinkSigningError(Exception):
    """Raised when the signing service cannot refresh links."""


class LinkSigner(Protocol):
    """Batch link-signing client."""

    async def sign(self, urls: list[str]) -> dict[str, str]:
        ...


@dataclass
class SignedLinkEntry:
    """A cached signed URL."""
    signed_url: str
    expires_at: float


class SignedLinkCache:
    """
    TTL cache in front of a link signer.

    Only platform asset URLs are eligible for signing. Everything else is
    left out of the result and callers fall back to the original URL.
    """

    def __init__(
        self,
        signer: LinkSigner | None,
        ttl_seconds: float = 240.0,
        platform_marker: str = "discord",
        cdn_marker: str = "cdn",
        asset_path_marker: str = "/attachments/",
        clock: Callable[[], float] = time.monotonic,
    ):
        self.signer = signer
        self.ttl_seconds = ttl_seconds
        self.platform_marker = platform_marker.lower()
        self.cdn_marker = cdn_marker.lower()
        self.asset_path_marker = asset_path_marker.lower()
        self.clock = clock

        self._entries: dict[str, SignedLinkEntry] = {}
        self._lock = threading.Lock()

    def is_eligible(self, url: str) -> bool:
        """Check whether a URL points at the platform's own asset hosting."""
        try:
            parts = urlsplit(url)
        except ValueError:
            return False

        host = (parts.hostname or "").lower()
        path = parts.path.lower()
        if self.platform_marker not in host:
            return False
        return self.cdn_marker in host or self.asset_path_marker in path

    def _lookup(self, url: str, now: float) -> str | None:
        entry = self._entries.get(url)
        if entry is None:
            return None
        if entry.expires_at <= now:
            del self._entries[url]
            return None
        return entry.signed_url

    async def resolve(self, urls: Iterable[str]) -> dict[str, str]:
        """
        Resolve asset URLs to signed URLs.

        Args:
            urls: Candidate URLs.

        Returns:
            Mapping of original URL to signed URL for every URL that could
            be resolved. Ineligible URLs and URLs whose signing failed are
            absent.
        """
        eligible = [u for u in dict.fromkeys(urls) if self.is_eligible(u)]
        if not eligible:
            return {}

        resolved: dict[str, str] = {}
        misses: list[str] = []

        with self._lock:
            now = self.clock()
            for url in eligible:
                signed = self._lookup(url, now)
                if signed is None:
                    misses.append(url)
                else:
                    resolved[url] = signed

        if not misses or self.signer is None:
            return resolved

        try:
            refreshed = await self.signer.sign(misses)
        except Exception as e:
            logger.warning(f"[Signed Links] Could not refresh {len(misses)} URL(s): {e}")
            return resolved

        with self._lock:
            expires_at = self.clock() + self.ttl_seconds
            for original, signed in refreshed.items():
                self._entries[original] = SignedLinkEntry(signed, expires_at)

        for url in misses:
            if url in refreshed:
                resolved[url] = refreshed[url]

        logger.debug(f"[Signed Links] Refreshed {len(refreshed)}/{len(misses)} URL(s)")
        return resolved

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class DiscordLinkSigner:
    """
    Link signer backed by Discord's ``attachments/refresh-urls`` endpoint.

    Configuration:
    - token: Bot token used for the Authorization header
    - api_base: REST API base URL
    - timeout: Request timeout in seconds
    """

    def __init__(
        self,
        token: str,
        api_base: str = "https://discord.com/api/v10",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.token = token
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def sign(self, urls: list[str]) -> dict[str, str]:
        if not urls:
            return {}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    f"{self.api_base}/attachments/refresh-urls",
                    headers={
                        "Authorization": f"Bot {self.token}",
                        "Content-Type": "application/json",
                    },
                    json={"attachment_urls": urls},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise LinkSigningError(f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise LinkSigningError(str(e) or type(e).__name__) from e
        except ValueError as e:
            raise LinkSigningError(f"Invalid response body: {e}") from e

        if not isinstance(data, dict):
            raise LinkSigningError("Unexpected response structure")

        refreshed: dict[str, str] = {}
        for item in data.get("refreshed_urls") or []:
            original = item.get("original")
            signed = item.get("refreshed")
            if original and signed:
                refreshed[original] = signed
        return refreshed
