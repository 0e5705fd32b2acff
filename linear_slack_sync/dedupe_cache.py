"""In-memory guard against linking the same Slack message twice."""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from typing import Callable


class DedupeCache:
    """Remember recently claimed (channel, ts) pairs for a bounded window.

    Slack may redeliver an event; the Linear link mutation is not idempotent,
    so a redelivered notification would otherwise create a second attachment.
    Entries live in process memory only and are lost on restart.
    """

    def __init__(
        self,
        window_seconds: float,
        max_entries: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.window_seconds = window_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[tuple[str, str], float] = OrderedDict()
        self._lock = threading.Lock()

    def claim(self, channel_id: str, timestamp: str) -> bool:
        """Record the message and return True, or False if it was claimed recently."""
        key = (channel_id, timestamp)
        now = self._clock()
        with self._lock:
            self._expire(now)
            if key in self._entries:
                return False
            self._entries[key] = now
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)
            return True

    def release(self, channel_id: str, timestamp: str) -> None:
        """Forget a claim so the message can be processed again."""
        with self._lock:
            self._entries.pop((channel_id, timestamp), None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _expire(self, now: float) -> None:
        cutoff = now - self.window_seconds
        while self._entries:
            key, claimed_at = next(iter(self._entries.items()))
            if claimed_at > cutoff:
                break
            del self._entries[key]
