"""Configuration schema using Pydantic."""

from pathlib import Path
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DiscordConfig(BaseModel):
    """Discord channel configuration."""
    token: str = ""  # Bot token from Discord Developer Portal
    api_base: str = "https://discord.com/api/v10"
    allow_guilds: list[str] = Field(default_factory=list)  # Allowed guild IDs (empty = all)
    allow_channels: list[str] = Field(default_factory=list)  # Active channel IDs (empty = all)


class ShapesConfig(BaseModel):
    """Shapes relay configuration."""
    api_key: str = ""
    username: str = ""  # Shape username; model is shapesinc/<username>
    api_base: str = "https://api.shapes.inc/v1"
    timeout_seconds: float = 60.0


class FilterConfig(BaseModel):
    """Automated-author detection configuration."""
    allow_list: list[str] = Field(default_factory=list)  # User IDs, names or display names
    window_seconds: float = 30.0
    max_messages: int = 5  # Messages per author per window before rapid-fire
    # None means use the built-in tables
    indicator_glyphs: list[str] | None = None
    response_patterns: list[str] | None = None
    name_patterns: list[str] | None = None


class MediaConfig(BaseModel):
    """Reply media configuration."""
    signed_link_ttl_seconds: float = 240.0  # Platform signs for 300s
    platform_marker: str = "discord"
    cdn_marker: str = "cdn"
    asset_path_marker: str = "/attachments/"


class RelayConfig(BaseModel):
    """Relay behaviour configuration."""
    include_author_name: bool = True  # Forward as "<name>: <text>"
    fallback_reply: str | None = "**{name}** didn't provide a specific textual response."  # {name} is the shape; null disables


class StorageConfig(BaseModel):
    """Durable storage configuration."""
    data_dir: str = "~/.shaperelay/data"


class Config(BaseSettings):
    """Root configuration for ShapeRelay."""
    discord: DiscordConfig = Field(default_factory=DiscordConfig)
    shapes: ShapesConfig = Field(default_factory=ShapesConfig)
    filter: FilterConfig = Field(default_factory=FilterConfig)
    media: MediaConfig = Field(default_factory=MediaConfig)
    relay: RelayConfig = Field(default_factory=RelayConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)

    model_config = SettingsConfigDict(
        env_prefix="SHAPERELAY_",
        env_nested_delimiter="__",
    )

    @property
    def data_path(self) -> Path:
        """Get expanded data directory path."""
        return Path(self.storage.data_dir).expanduser()

    def missing_settings(self) -> list[str]:
        """Names of required settings that are not set."""
        required = {
            "discord.token": self.discord.token,
            "shapes.api_key": self.shapes.api_key,
            "shapes.username": self.shapes.username,
        }
        return [name for name, value in required.items() if not value]
