"""
Key-set storage for ShapeRelay.

Each named set is kept as a JSON array in ``<data_dir>/<name>.json``, which
is the format earlier releases wrote (``known_bots.json``).
"""

import json
from pathlib import Path
from typing import Hashable, Iterable, Protocol

from loguru import logger


class KeySetStore(Protocol):
    """Durable get/put of named string sets."""

    def load(self, name: str) -> set[str]:
        ...

    def save(self, name: str, ids: Iterable[str]) -> None:
        ...

    def stamp(self, name: str) -> Hashable:
        ...


class JsonKeySetStore:
    """
    File-backed key-set store.

    Loading never fails: a missing or unreadable file yields an empty set.
    Saving raises ``OSError`` on write failure and leaves handling to the
    caller.
    """

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir).expanduser()

    def _path(self, name: str) -> Path:
        return self.data_dir / f"{name}.json"

    def load(self, name: str) -> set[str]:
        path = self._path(name)
        if not path.exists():
            logger.info(f"No {path.name} found. Starting with an empty set.")
            return set()

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading {path}: {e}")
            return set()

        if not isinstance(data, list):
            logger.warning(f"Invalid format in {path.name}. Starting with an empty set.")
            return set()

        ids = {str(item) for item in data}
        logger.info(f"Loaded {len(ids)} entries from {path.name}")
        return ids

    def save(self, name: str, ids: Iterable[str]) -> None:
        path = self._path(name)
        self.data_dir.mkdir(parents=True, exist_ok=True)

        # Atomic replace
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(sorted(ids), indent=2), encoding="utf-8")
        tmp_path.replace(path)
        logger.debug(f"Saved {path.name}")

    def stamp(self, name: str) -> tuple[int, int] | None:
        """
        Version marker of a stored set.

        Changes whenever the file is rewritten, by this process or another
        one. None when the file does not exist.
        """
        try:
            st = self._path(name).stat()
        except FileNotFoundError:
            return None
        return (st.st_ino, st.st_mtime_ns)
