"""
Relay gateway for ShapeRelay.

Handles one inbound chat message end to end:
1. Ignore the relay's own messages
2. Rapid-fire and automated-author checks (skipped for allow-listed authors)
3. Forward to the relay service
4. Format the reply and send it back to the channel

Every message is an independent unit of work. Failures of the relay call
are turned into fixed chat messages; nothing is retried.
"""

import time
from enum import Enum
from typing import Protocol

from loguru import logger

from shaperelay.bus.events import InboundMessage, ReplyPayload
from shaperelay.config.schema import Config
from shaperelay.filtering.allowlist import AllowList
from shaperelay.filtering.classifier import BotClassifier
from shaperelay.filtering.patterns import DetectionPatterns
from shaperelay.filtering.rate import RateWindowTracker
from shaperelay.filtering.registry import KnownBotRegistry
from shaperelay.media.formatter import ReplyFormatter
from shaperelay.media.signing import LinkSigner, SignedLinkCache
from shaperelay.relay.client import FailureKind, RelayClient, RelayError
from shaperelay.relay.messages import failure_message
from shaperelay.storage.store import KeySetStore


class ChatSender(Protocol):
    """Outbound capabilities of a chat channel."""

    async def send(self, channel_id: str, payload: ReplyPayload | str) -> None:
        ...

    async def notify_typing(self, channel_id: str) -> None:
        ...


class Outcome(str, Enum):
    """What the gateway did with a message."""
    SELF = "self"
    RAPID_FIRE = "rapid_fire"
    AUTOMATED = "automated"
    EMPTY = "empty"
    REPLIED = "replied"
    FALLBACK = "fallback"
    SILENT = "silent"
    FAILED = "failed"


class RelayGateway:
    """
    Orchestrates classification, relay and reply formatting.

    The gateway owns the shared state objects (known bot registry, rate
    windows, signed link cache) and hands them to the components it builds.
    """

    def __init__(
        self,
        sender: ChatSender,
        relay: RelayClient,
        registry: KnownBotRegistry,
        allow_list: AllowList,
        classifier: BotClassifier,
        tracker: RateWindowTracker,
        formatter: ReplyFormatter,
        shape_name: str = "the Shape",
        include_author_name: bool = True,
        fallback_reply: str | None = None,
        self_id: str | None = None,
    ):
        self.sender = sender
        self.relay = relay
        self.registry = registry
        self.allow_list = allow_list
        self.classifier = classifier
        self.tracker = tracker
        self.formatter = formatter
        self.shape_name = shape_name
        self.include_author_name = include_author_name
        self.fallback_reply = fallback_reply
        self.self_id = self_id

    @classmethod
    def from_config(
        cls,
        config: Config,
        sender: ChatSender,
        relay: RelayClient,
        signer: LinkSigner | None = None,
        store: KeySetStore | None = None,
    ) -> "RelayGateway":
        """
        Build a gateway and its components from configuration.

        Args:
            config: Loaded configuration.
            sender: Chat channel used for replies and typing indicators.
            relay: Relay service client.
            signer: Optional link signer for platform asset URLs.
            store: Optional durable store for the known bot registry.

        Returns:
            A ready RelayGateway.
        """
        allow_list = AllowList(config.filter.allow_list)
        registry = KnownBotRegistry(store)
        patterns = DetectionPatterns.build(
            indicator_glyphs=config.filter.indicator_glyphs,
            response_patterns=config.filter.response_patterns,
            name_patterns=config.filter.name_patterns,
            target_name=config.shapes.username,
        )
        link_cache = SignedLinkCache(
            signer,
            ttl_seconds=config.media.signed_link_ttl_seconds,
            platform_marker=config.media.platform_marker,
            cdn_marker=config.media.cdn_marker,
            asset_path_marker=config.media.asset_path_marker,
        )

        return cls(
            sender=sender,
            relay=relay,
            registry=registry,
            allow_list=allow_list,
            classifier=BotClassifier(registry, allow_list, patterns),
            tracker=RateWindowTracker(
                allow_list,
                window_seconds=config.filter.window_seconds,
                threshold=config.filter.max_messages,
            ),
            formatter=ReplyFormatter(link_cache),
            shape_name=config.shapes.username or "the Shape",
            include_author_name=config.relay.include_author_name,
            fallback_reply=config.relay.fallback_reply,
        )

    async def handle(self, message: InboundMessage, now: float | None = None) -> Outcome:
        """
        Process one inbound message.

        Args:
            message: The inbound message.
            now: Arrival time in epoch seconds; defaults to the message
                timestamp.

        Returns:
            The outcome, mainly for logging and tests.
        """
        author = message.author
        now = message.timestamp if now is None else now

        if self.self_id and author.id == self.self_id:
            return Outcome.SELF

        # Pick up an administrative clear made by another process
        self.registry.refresh()

        if self.allow_list.allows_author(author):
            logger.debug(f"[Allow-list] {author.label} is allow-listed, skipping bot checks")
        else:
            if self.tracker.observe(message.channel_id, author.id, now, names=author.names):
                self.registry.add(author.id)
                logger.info(f"[Bot Filter] Blocking rapid-fire author {author.label} (ID: {author.id})")
                return Outcome.RAPID_FIRE

            verdict = self.classifier.classify(message)
            if verdict.is_automated:
                logger.info(
                    f"[Bot Filter] Blocking automated author {author.label} "
                    f"(ID: {author.id}, reason: {verdict.reason.value})"
                )
                return Outcome.AUTOMATED

        text = (message.content or "").strip()
        if not text:
            logger.debug(f"Ignoring empty message from {author.label}")
            return Outcome.EMPTY

        return await self._relay(message, text)

    async def _relay(self, message: InboundMessage, text: str) -> Outcome:
        author = message.author
        channel_id = message.channel_id

        forwarded = f"{author.label}: {text}" if self.include_author_name else text

        try:
            await self.sender.notify_typing(channel_id)
        except Exception as e:
            logger.warning(f"[Typing Indicator] Error in channel {channel_id}: {e}")

        started = time.monotonic()
        try:
            response = await self.relay.complete(author.id, channel_id, message.guild_id, forwarded)
        except RelayError as e:
            logger.error(f"Relay failed for channel {channel_id} ({e.kind.value}): {e.detail}")
            await self._send(channel_id, failure_message(e.kind, self.shape_name))
            return Outcome.FAILED
        except Exception as e:
            logger.exception(f"Unexpected relay error for channel {channel_id}: {e}")
            await self._send(channel_id, failure_message(FailureKind.OTHER, self.shape_name))
            return Outcome.FAILED

        logger.debug(f"Relay answered in {time.monotonic() - started:.2f}s")

        if response.text and response.text.strip():
            payload = await self.formatter.format(response.text)
            await self._send(channel_id, payload)
            if response.is_automated_origin and self.registry.add(author.id):
                logger.info(f"Marked user {author.id} as bot based on relay response")
            return Outcome.REPLIED

        if self.fallback_reply:
            await self._send(channel_id, self.fallback_reply.replace("{name}", self.shape_name))
            return Outcome.FALLBACK

        logger.info(f"No textual response from relay for channel {channel_id}")
        return Outcome.SILENT

    async def _send(self, channel_id: str, payload: ReplyPayload | str) -> None:
        try:
            await self.sender.send(channel_id, payload)
        except Exception as e:
            logger.error(f"Could not send message to channel {channel_id}: {e}")
