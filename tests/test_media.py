"""
Tests for reply media handling.

Tests:
- URL extraction and media classification
- Signed link cache and Discord link signer
- Reply formatting
"""

import json

import httpx
import pytest
from unittest.mock import AsyncMock

from shaperelay.media import (
    DiscordLinkSigner,
    LinkSigningError,
    MediaType,
    ReplyFormatter,
    SignedLinkCache,
    classify,
    extract_image_urls,
    extract_media_urls,
)


CDN_URL = "https://cdn.discordapp.com/attachments/1/2/cat.png?ex=old"
MEDIA_URL = "https://media.discordapp.net/attachments/1/2/dog.jpg"


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestMediaResolver:
    """Tests for URL extraction and classification."""

    @pytest.mark.parametrize("url,expected", [
        ("http://x/a.png", MediaType.IMAGE),
        ("https://x/a.JPEG?size=large#top", MediaType.IMAGE),
        ("https://x/clip.webm", MediaType.VIDEO),
        ("https://x/song.mp3", MediaType.AUDIO),
        ("https://x/readme.txt", MediaType.NONE),
        ("https://x/page", MediaType.NONE),
        ("ftp://x/a.png", MediaType.NONE),
        ("https://x/a.png.html", MediaType.NONE),
    ])
    def test_classify(self, url, expected):
        assert classify(url) == expected

    def test_dedup_brackets_and_extension_filter(self):
        text = "<http://x/a.png>\nhttp://x/a.png\nhttp://x/b.txt"
        assert extract_image_urls(text) == ["http://x/a.png"]

    def test_preserves_first_occurrence_order(self):
        text = "first http://x/b.gif\nthen <http://x/a.png>\nagain http://x/b.gif"
        assert extract_image_urls(text) == ["http://x/b.gif", "http://x/a.png"]

    def test_wrapped_urls_come_first_within_a_line(self):
        text = "http://x/b.gif or <http://x/a.png>"
        assert extract_image_urls(text) == ["http://x/a.png", "http://x/b.gif"]

    def test_strips_trailing_punctuation(self):
        assert extract_image_urls("look at http://x/a.png, nice.") == ["http://x/a.png"]

    def test_non_http_schemes_are_ignored(self):
        assert extract_image_urls("ftp://x/a.png and <ftp://x/b.png>") == []

    def test_extract_other_kinds(self):
        text = "http://x/a.png http://x/v.mp4 http://x/s.ogg"
        assert extract_media_urls(text, [MediaType.VIDEO, MediaType.AUDIO]) == [
            "http://x/v.mp4",
            "http://x/s.ogg",
        ]

    def test_no_text(self):
        assert extract_image_urls("") == []
        assert extract_image_urls(None) == []


class TestSignedLinkCache:
    """Tests for signed URL resolution."""

    @pytest.fixture
    def clock(self):
        return FakeClock(1000.0)

    @pytest.fixture
    def signer(self):
        signer = AsyncMock()
        signer.sign.side_effect = lambda urls: {u: u + "&signed=1" for u in urls}
        return signer

    def test_eligibility(self):
        cache = SignedLinkCache(None)
        assert cache.is_eligible(CDN_URL)
        assert cache.is_eligible(MEDIA_URL)
        assert not cache.is_eligible("https://discord.com/channels/1/2")
        assert not cache.is_eligible("https://example.com/attachments/cat.png")

    @pytest.mark.asyncio
    async def test_ineligible_urls_are_absent(self, signer):
        cache = SignedLinkCache(signer)
        assert await cache.resolve(["http://x/a.png"]) == {}
        signer.sign.assert_not_called()

    @pytest.mark.asyncio
    async def test_misses_are_batched(self, signer, clock):
        cache = SignedLinkCache(signer, clock=clock)
        result = await cache.resolve([CDN_URL, MEDIA_URL, "http://x/a.png"])

        signer.sign.assert_awaited_once_with([CDN_URL, MEDIA_URL])
        assert result == {CDN_URL: CDN_URL + "&signed=1", MEDIA_URL: MEDIA_URL + "&signed=1"}

    @pytest.mark.asyncio
    async def test_cache_hit_within_ttl(self, signer, clock):
        cache = SignedLinkCache(signer, ttl_seconds=240.0, clock=clock)
        first = await cache.resolve([CDN_URL])
        clock.now += 239.0
        second = await cache.resolve([CDN_URL])

        assert first == second
        assert signer.sign.await_count == 1

    @pytest.mark.asyncio
    async def test_refreshes_after_ttl(self, signer, clock):
        cache = SignedLinkCache(signer, ttl_seconds=240.0, clock=clock)
        await cache.resolve([CDN_URL])
        clock.now += 240.0
        await cache.resolve([CDN_URL])

        assert signer.sign.await_count == 2

    @pytest.mark.asyncio
    async def test_failure_leaves_cache_untouched(self, clock):
        signer = AsyncMock()
        signer.sign.side_effect = LinkSigningError("HTTP 500")
        cache = SignedLinkCache(signer, clock=clock)

        assert await cache.resolve([CDN_URL]) == {}
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_partial_response(self, clock):
        signer = AsyncMock()
        signer.sign.return_value = {CDN_URL: "https://signed/cat"}
        cache = SignedLinkCache(signer, clock=clock)

        assert await cache.resolve([CDN_URL, MEDIA_URL]) == {CDN_URL: "https://signed/cat"}


class TestDiscordLinkSigner:
    """Tests for the refresh-urls client."""

    @pytest.mark.asyncio
    async def test_sign(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"refreshed_urls": [
                {"original": CDN_URL, "refreshed": "https://signed/cat"},
            ]})

        signer = DiscordLinkSigner("tok", transport=httpx.MockTransport(handler))
        result = await signer.sign([CDN_URL])

        assert result == {CDN_URL: "https://signed/cat"}
        assert seen["url"] == "https://discord.com/api/v10/attachments/refresh-urls"
        assert seen["auth"] == "Bot tok"
        assert seen["body"] == {"attachment_urls": [CDN_URL]}

    @pytest.mark.asyncio
    async def test_http_error_raises(self):
        signer = DiscordLinkSigner(
            "tok", transport=httpx.MockTransport(lambda r: httpx.Response(401, json={}))
        )
        with pytest.raises(LinkSigningError):
            await signer.sign([CDN_URL])


class TestReplyFormatter:
    """Tests for reply formatting."""

    @pytest.mark.asyncio
    async def test_blank_text_is_unchanged(self):
        payload = await ReplyFormatter().format("   ")
        assert payload.content == "   "
        assert payload.embeds == []

    @pytest.mark.asyncio
    async def test_text_without_images(self):
        text = "Just words.\n\nAnd a link https://x/page"
        payload = await ReplyFormatter().format(text)
        assert payload.to_dict() == {"content": text}

    @pytest.mark.asyncio
    async def test_lone_image_has_no_content(self):
        payload = await ReplyFormatter().format("http://x/a.png")
        assert payload.to_dict() == {"embeds": [{"image": {"url": "http://x/a.png"}}]}
        assert payload.content is None

    @pytest.mark.asyncio
    async def test_inline_url_is_kept_in_content(self):
        payload = await ReplyFormatter().format("see this: http://x/a.png and text after")
        assert "and text after" in payload.content
        assert [e.url for e in payload.embeds] == ["http://x/a.png"]

    @pytest.mark.asyncio
    async def test_wrapped_urls_are_removed_everywhere(self):
        text = "Here you go <http://x/a.png> enjoy!\n\n  http://x/b.gif  \nbye"
        payload = await ReplyFormatter().format(text)
        assert payload.content == "Here you go  enjoy!\nbye"
        assert [e.url for e in payload.embeds] == ["http://x/a.png", "http://x/b.gif"]

    @pytest.mark.asyncio
    async def test_lone_image_with_trailing_punctuation(self):
        payload = await ReplyFormatter().format("http://x/a.png.")
        assert payload.to_dict() == {"embeds": [{"image": {"url": "http://x/a.png"}}]}

    @pytest.mark.asyncio
    async def test_own_line_url_with_punctuation_is_removed(self):
        payload = await ReplyFormatter().format("Here it is:\n  http://x/a.png!  \nEnjoy")
        assert payload.content == "Here it is:\nEnjoy"
        assert [e.url for e in payload.embeds] == ["http://x/a.png"]

    @pytest.mark.asyncio
    async def test_uses_signed_urls(self):
        cache = AsyncMock()
        cache.resolve.return_value = {CDN_URL: "https://signed/cat"}
        payload = await ReplyFormatter(cache).format(f"{CDN_URL}\nhttp://x/a.png")

        cache.resolve.assert_awaited_once_with([CDN_URL, "http://x/a.png"])
        assert [e.url for e in payload.embeds] == ["https://signed/cat", "http://x/a.png"]
        assert payload.content is None
