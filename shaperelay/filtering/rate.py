"""
Sliding-window rate tracking per channel.

Two bots answering each other produce a burst of messages from the same
author that type and content checks miss. The tracker keeps the trailing
window of (author id, timestamp) events for each channel and flags an
author once they reach the message threshold inside the window.
"""

import threading
import time
from collections import defaultdict
from typing import Iterable

from loguru import logger

from shaperelay.filtering.allowlist import AllowList


class RateWindowTracker:
    """Per-channel sliding window of message events."""

    def __init__(
        self,
        allow_list: AllowList | None = None,
        window_seconds: float = 30.0,
        threshold: int = 5,
    ):
        self.allow_list = allow_list or AllowList()
        self.window_seconds = window_seconds
        self.threshold = threshold

        # channel_id -> [(author_id, timestamp)]
        self._windows: dict[str, list[tuple[str, float]]] = defaultdict(list)
        self._lock = threading.Lock()

    def observe(
        self,
        channel_id: str,
        author_id: str,
        now: float | None = None,
        names: Iterable[str | None] = (),
    ) -> bool:
        """
        Record a message and report whether its author is rapid-firing.

        The window is pruned before counting and the current message is
        appended regardless of the verdict. With a threshold of N, the Nth
        message inside the window trips detection.

        Args:
            channel_id: Channel the message arrived in.
            author_id: Author of the message.
            now: Arrival time in epoch seconds (defaults to the current time).
            names: Extra identifiers (name, display name) for allow-list checks.

        Returns:
            True if the author reached the threshold within the window.
        """
        if self.allow_list.allows(author_id, *names):
            return False

        now = time.time() if now is None else now

        with self._lock:
            events = [
                (aid, ts) for aid, ts in self._windows[channel_id]
                if now - ts < self.window_seconds
            ]
            count = sum(1 for aid, _ in events if aid == author_id)
            events.append((author_id, now))
            self._windows[channel_id] = events

        # count excludes the current message
        if count + 1 >= self.threshold:
            logger.info(
                f"[Bot Filter] Rapid-fire detected: {author_id} sent {count + 1} messages "
                f"in {self.window_seconds:g}s in channel {channel_id}"
            )
            return True
        return False

    def reset(self, channel_id: str | None = None) -> None:
        """Forget history for one channel, or for every channel."""
        with self._lock:
            if channel_id is None:
                self._windows.clear()
            else:
                self._windows.pop(channel_id, None)

    def window_size(self, channel_id: str) -> int:
        """Number of events currently held for a channel."""
        with self._lock:
            return len(self._windows.get(channel_id, []))
