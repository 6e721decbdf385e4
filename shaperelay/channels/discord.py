"""
Discord channel integration for ShapeRelay.

Uses discord.py for:
- Receiving guild and DM messages
- Guild/channel allowlists (active channels)
- Typing indicators
- Sending replies with image embeds
"""

from loguru import logger

from shaperelay.bus.events import Author, AuthorKind, InboundMessage, ReplyPayload
from shaperelay.config.schema import DiscordConfig

try:
    import discord
    DISCORD_AVAILABLE = True
except ImportError:
    DISCORD_AVAILABLE = False
    discord = None


def to_inbound(message: "discord.Message") -> InboundMessage:
    """Convert a discord.py message into an InboundMessage."""
    author = message.author
    return InboundMessage(
        author=Author(
            id=str(author.id),
            name=author.name,
            display_name=getattr(author, "display_name", None),
            kind=AuthorKind.BOT if author.bot else AuthorKind.HUMAN,
        ),
        channel_id=str(message.channel.id),
        guild_id=str(message.guild.id) if message.guild else None,
        content=message.content or "",
        timestamp=message.created_at.timestamp(),
    )


class DiscordChannel:
    """
    Discord channel implementation using discord.py.

    Configuration (via DiscordConfig):
    - token: Bot token from Discord Developer Portal
    - allow_guilds: List of allowed guild IDs (empty = all)
    - allow_channels: List of active channel IDs (empty = all)

    Inbound messages are handed to the relay gateway; the gateway replies
    through ``send`` and ``notify_typing``.
    """

    name = "discord"

    def __init__(self, config: DiscordConfig):
        """
        Initialize Discord channel.

        Args:
            config: Discord configuration.
        """
        if not DISCORD_AVAILABLE:
            raise ImportError(
                "discord.py not installed. Install with: pip install discord.py"
            )

        self.config = config
        self.token = config.token
        self.allow_guilds = set(config.allow_guilds or [])
        self.allow_channels = set(config.allow_channels or [])

        intents = discord.Intents.default()
        intents.message_content = True
        intents.dm_messages = True
        intents.guild_messages = True

        self.client = discord.Client(intents=intents)
        self.gateway = None
        self._running = False

        self._setup_handlers()

    def attach(self, gateway) -> None:
        """Route inbound messages to a relay gateway."""
        self.gateway = gateway

    def _setup_handlers(self) -> None:
        """Set up Discord event handlers."""

        @self.client.event
        async def on_ready():
            logger.info(f"Discord bot logged in as {self.client.user}")
            if self.gateway is not None:
                self.gateway.self_id = str(self.client.user.id)

        @self.client.event
        async def on_message(message: discord.Message):
            # Ignore own messages
            if message.author == self.client.user:
                return

            if not self._is_active(message):
                return

            if self.gateway is None:
                logger.warning("Discord message received before a gateway was attached")
                return

            # discord.py runs each event in its own task
            outcome = await self.gateway.handle(to_inbound(message))
            logger.debug(f"Message {message.id} in {message.channel.id}: {outcome.value}")

    def _is_active(self, message: discord.Message) -> bool:
        """Check whether the relay is active where the message was sent."""
        if message.guild:
            if self.allow_guilds and str(message.guild.id) not in self.allow_guilds:
                return False
            if self.allow_channels and str(message.channel.id) not in self.allow_channels:
                return False
        return True

    async def _resolve_channel(self, channel_id: str):
        channel = self.client.get_channel(int(channel_id))
        if channel is None:
            channel = await self.client.fetch_channel(int(channel_id))
        return channel

    async def send(self, channel_id: str, payload: ReplyPayload | str) -> None:
        """Send a reply to a Discord channel."""
        channel = await self._resolve_channel(channel_id)

        if isinstance(payload, str):
            await channel.send(payload)
            return

        embeds = []
        for embed in payload.embeds:
            discord_embed = discord.Embed()
            discord_embed.set_image(url=embed.url)
            embeds.append(discord_embed)

        # Discord accepts at most 10 embeds per message
        if len(embeds) > 10:
            logger.warning(f"Dropping {len(embeds) - 10} embed(s) over the limit for channel {channel_id}")
        await channel.send(content=payload.content or None, embeds=embeds[:10])

    async def notify_typing(self, channel_id: str) -> None:
        """Show the typing indicator in a channel."""
        channel = await self._resolve_channel(channel_id)
        await channel.typing()

    async def start(self) -> None:
        """Start the Discord bot."""
        logger.info("Starting Discord channel")
        self._running = True

        try:
            await self.client.start(self.token)
        except Exception as e:
            logger.error(f"Discord bot error: {e}")
            self._running = False
            raise

    async def stop(self) -> None:
        """Stop the Discord bot."""
        logger.info("Stopping Discord channel")
        self._running = False
        await self.client.close()

    @property
    def is_running(self) -> bool:
        """Check if the channel is running."""
        return self._running and self.client.is_ready()
