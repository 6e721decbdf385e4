"""CLI commands for ShapeRelay."""

import asyncio
import sys
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from shaperelay import __version__, __logo__

app = typer.Typer(
    name="shaperelay",
    help=f"{__logo__} ShapeRelay - Discord relay for Shapes personas",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} ShapeRelay v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """ShapeRelay - Discord relay for Shapes personas."""
    pass


def _load(config_path: Path | None, require: bool = False):
    from shaperelay.config.loader import ConfigError, load_config, validate_required

    try:
        config = load_config(config_path)
        if require:
            validate_required(config)
    except ConfigError as e:
        console.print(f"[red]Error: {e}[/red]")
        console.print("Set them in ~/.shaperelay/config.json or via SHAPERELAY_* environment variables")
        raise typer.Exit(1)
    return config


# ============================================================================
# Run
# ============================================================================


@app.command()
def run(
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file path"),
    verbose: bool = typer.Option(False, "--verbose", help="Verbose output"),
):
    """Start relaying Discord messages to the shape."""
    from shaperelay.channels.discord import DiscordChannel
    from shaperelay.gateway import RelayGateway
    from shaperelay.media.signing import DiscordLinkSigner
    from shaperelay.relay.client import ShapesClient
    from shaperelay.storage.store import JsonKeySetStore

    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")

    config = _load(config_path, require=True)

    relay = ShapesClient(
        api_key=config.shapes.api_key,
        username=config.shapes.username,
        api_base=config.shapes.api_base,
        timeout=config.shapes.timeout_seconds,
    )
    signer = DiscordLinkSigner(config.discord.token, api_base=config.discord.api_base)
    store = JsonKeySetStore(config.data_path)

    channel = DiscordChannel(config.discord)
    gateway = RelayGateway.from_config(config, channel, relay, signer=signer, store=store)
    channel.attach(gateway)

    console.print(f"{__logo__} Starting ShapeRelay for [cyan]{config.shapes.username}[/cyan] ({relay.model})")
    console.print(f"[green]✓[/green] Known bots loaded: {len(gateway.registry)}")
    if len(gateway.allow_list):
        console.print(f"[green]✓[/green] Allow-listed: {', '.join(gateway.allow_list)}")
    if config.discord.allow_channels:
        console.print(f"[green]✓[/green] Active channels: {', '.join(config.discord.allow_channels)}")
    else:
        console.print("[yellow]No channel allowlist set; relaying in every channel[/yellow]")

    async def _run():
        try:
            await channel.start()
        finally:
            await channel.stop()

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        console.print("\nShutting down...")


# ============================================================================
# Status
# ============================================================================


@app.command()
def status(
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file path"),
):
    """Show configuration status."""
    from shaperelay.config.loader import get_config_path
    from shaperelay.storage.store import JsonKeySetStore

    config = _load(config_path)
    path = config_path or get_config_path()

    table = Table(title=f"{__logo__} ShapeRelay Status")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Config file", f"{path} {'[green]✓[/green]' if path.exists() else '[dim](not found)[/dim]'}")
    table.add_row("Discord token", "[green]✓[/green]" if config.discord.token else "[red]missing[/red]")
    table.add_row("Shapes API key", "[green]✓[/green]" if config.shapes.api_key else "[red]missing[/red]")
    table.add_row("Shape", config.shapes.username or "[red]missing[/red]")
    table.add_row("Rapid-fire limit", f"{config.filter.max_messages} msgs / {config.filter.window_seconds:g}s")
    table.add_row("Allow-list", ", ".join(config.filter.allow_list) or "[dim]none[/dim]")
    table.add_row("Known bots", str(len(JsonKeySetStore(config.data_path).load("known_bots"))))

    console.print(table)


# ============================================================================
# Known bots
# ============================================================================


bots_app = typer.Typer(help="Manage the known bot registry")
app.add_typer(bots_app, name="bots")


@bots_app.command("list")
def bots_list(
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file path"),
):
    """List authors recorded as bots."""
    from shaperelay.filtering.registry import KnownBotRegistry
    from shaperelay.storage.store import JsonKeySetStore

    config = _load(config_path)
    registry = KnownBotRegistry(JsonKeySetStore(config.data_path))

    if not len(registry):
        console.print("No known bots.")
        return

    table = Table(title="Known Bots")
    table.add_column("Author ID", style="cyan")
    for author_id in registry:
        table.add_row(author_id)
    console.print(table)


@bots_app.command("clear")
def bots_clear(
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file path"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Clear the known bot registry."""
    from shaperelay.filtering.registry import KnownBotRegistry
    from shaperelay.storage.store import JsonKeySetStore

    config = _load(config_path)
    registry = KnownBotRegistry(JsonKeySetStore(config.data_path))

    if not yes and not typer.confirm(f"Remove {len(registry)} known bot(s)?"):
        raise typer.Exit()

    removed = registry.clear()
    console.print(f"[green]✓[/green] Known bots list has been cleared ({removed} removed)")
    console.print("[dim]A running relay picks this up on its next message[/dim]")


# ============================================================================
# Preview
# ============================================================================


@app.command()
def preview(
    text: str = typer.Argument(..., help="Relay reply text to format"),
):
    """Show how a relay reply would be formatted (no link signing)."""
    import json

    from shaperelay.media.formatter import ReplyFormatter

    payload = asyncio.run(ReplyFormatter().format(text))
    console.print_json(json.dumps(payload.to_dict()))


if __name__ == "__main__":
    app()
