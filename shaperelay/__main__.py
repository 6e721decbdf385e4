"""Entry point for running ShapeRelay as a module."""

from shaperelay.cli.commands import app

if __name__ == "__main__":
    app()
