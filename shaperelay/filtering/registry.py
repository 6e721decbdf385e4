"""
Registry of authors confirmed to be automated.

The registry only grows during a process lifetime; entries are removed by
an explicit administrative clear, made either in this process or by
rewriting the store from another one (``shaperelay bots clear``). Every
change is written through to a key-set store. Write failures are logged
and the in-memory set stays authoritative.
"""

import threading
from typing import Hashable, Iterator

from loguru import logger

from shaperelay.storage.store import KeySetStore


class KnownBotRegistry:
    """Thread-safe, write-through set of known bot author ids."""

    def __init__(self, store: KeySetStore | None = None, name: str = "known_bots"):
        self.store = store
        self.name = name
        self._lock = threading.Lock()
        # Serializes snapshot + save so the last write carries the newest set
        self._save_lock = threading.Lock()
        self._stamp: Hashable = None
        self._ids: set[str] = set()
        if store:
            self._stamp = store.stamp(name)
            self._ids = store.load(name)

    def __contains__(self, author_id: object) -> bool:
        with self._lock:
            return author_id in self._ids

    def __len__(self) -> int:
        with self._lock:
            return len(self._ids)

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            return iter(sorted(self._ids))

    def add(self, author_id: str) -> bool:
        """
        Record an author as automated.

        Args:
            author_id: The author id to record.

        Returns:
            True if the id was newly inserted, False if already known.
        """
        with self._save_lock:
            with self._lock:
                if author_id in self._ids:
                    return False
                self._ids.add(author_id)
                snapshot = set(self._ids)
            self._persist(snapshot)
        return True

    def clear(self) -> int:
        """Remove every entry. Returns the number of entries removed."""
        with self._save_lock:
            with self._lock:
                removed = len(self._ids)
                self._ids.clear()
            self._persist(set())

        logger.info(f"[Bot Filter] Known bots cleared ({removed} removed)")
        return removed

    def refresh(self) -> bool:
        """
        Reload the set if the store was rewritten by someone else.

        Returns:
            True if the in-memory set was replaced.
        """
        if self.store is None:
            return False

        with self._save_lock:
            stamp = self.store.stamp(self.name)
            if stamp == self._stamp:
                return False
            ids = self.store.load(self.name)
            with self._lock:
                removed = len(self._ids - ids)
                self._ids = ids
            self._stamp = stamp

        logger.info(f"[Bot Filter] Known bots reloaded: {len(ids)} bots ({removed} removed)")
        return True

    def _persist(self, snapshot: set[str]) -> None:
        # Caller holds _save_lock
        if self.store is None:
            return
        try:
            self.store.save(self.name, snapshot)
        except Exception as e:
            logger.error(f"Error saving known bots: {e}")
        else:
            self._stamp = self.store.stamp(self.name)
            logger.debug(f"Known bots saved: {len(snapshot)} bots")
