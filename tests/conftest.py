"""
Pytest configuration and shared fixtures for ShapeRelay tests.
"""

import pytest
import sys
from pathlib import Path

# Add the project root to the path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from shaperelay.bus.events import Author, AuthorKind, InboundMessage


@pytest.fixture
def data_dir(tmp_path):
    """Create a temporary data directory."""
    data = tmp_path / "data"
    data.mkdir()
    return data


@pytest.fixture
def make_message():
    """Factory for inbound messages."""
    def _make(
        content: str = "hello there",
        author_id: str = "u1",
        name: str = "alice",
        display_name: str | None = None,
        kind: AuthorKind = AuthorKind.HUMAN,
        channel_id: str = "c1",
        guild_id: str | None = "g1",
        timestamp: float = 1000.0,
    ) -> InboundMessage:
        return InboundMessage(
            author=Author(id=author_id, name=name, display_name=display_name, kind=kind),
            channel_id=channel_id,
            guild_id=guild_id,
            content=content,
            timestamp=timestamp,
        )
    return _make


class FakeStore:
    """In-memory key-set store that records every save."""

    def __init__(self, initial: dict[str, set[str]] | None = None, fail: bool = False):
        self.data = {k: set(v) for k, v in (initial or {}).items()}
        self.saves: list[tuple[str, set[str]]] = []
        self.fail = fail
        self.version = 0

    def load(self, name: str) -> set[str]:
        return set(self.data.get(name, set()))

    def save(self, name: str, ids) -> None:
        if self.fail:
            raise OSError("disk full")
        self.data[name] = set(ids)
        self.saves.append((name, set(ids)))
        self.version += 1

    def stamp(self, name: str) -> int:
        return self.version

    def rewrite(self, name: str, ids) -> None:
        """Change a set behind the back of whoever loaded it."""
        self.data[name] = set(ids)
        self.version += 1


@pytest.fixture
def store():
    return FakeStore()
