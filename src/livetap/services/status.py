"""Per-channel health records with exponential backoff bookkeeping."""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import datetime, timedelta

from livetap.core.models import ChannelStatus, utcnow
from livetap.core.types import ChannelHealth

BASE_COOLDOWN = timedelta(seconds=1)


class StatusStore:
    """
    Process-lifetime store of ChannelStatus keyed by channel source URL.

    Every read-modify-write on a key runs under that key's stripe lock, so
    updates to one channel are linearizable while channels on other stripes
    proceed independently. No method awaits while holding a lock.
    """

    def __init__(
        self,
        *,
        stripes: int = 64,
        max_cooldown_multiplier: int = 1024,
        max_cooldown_seconds: float = 120.0,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._entries: dict[str, ChannelStatus] = {}
        self._locks = [threading.Lock() for _ in range(max(1, stripes))]
        self._max_multiplier = max_cooldown_multiplier
        self._max_cooldown = timedelta(seconds=max_cooldown_seconds)
        self._clock = clock

    def _lock(self, key: str) -> threading.Lock:
        return self._locks[hash(key) % len(self._locks)]

    def _entry(self, key: str) -> ChannelStatus:
        """Entry for key, created with defaults. Caller holds the key's lock."""
        entry = self._entries.get(key)
        if entry is None:
            entry = ChannelStatus()
            self._entries[key] = entry
        return entry

    def get_status(self, key: str) -> ChannelStatus:
        """Snapshot of a channel's status, creating the default record on first access."""
        with self._lock(key):
            return self._entry(key).model_copy()

    def peek(self, key: str) -> ChannelStatus | None:
        """Snapshot of a channel's status without creating one."""
        with self._lock(key):
            entry = self._entries.get(key)
            return entry.model_copy() if entry is not None else None

    def update_status(self, key: str, status: ChannelHealth, message: str) -> None:
        """Record a status transition; counters are left untouched."""
        with self._lock(key):
            entry = self._entry(key)
            entry.status = status
            entry.message = message
            entry.last_checked_at = self._clock()

    def increment_retry(self, key: str) -> int:
        with self._lock(key):
            entry = self._entry(key)
            entry.retry_count += 1
            return entry.retry_count

    def reset_retry(self, key: str) -> None:
        with self._lock(key):
            self._entry(key).retry_count = 0

    def double_cooldown(self, key: str) -> int:
        """Double the backoff multiplier, saturating at the configured ceiling."""
        with self._lock(key):
            entry = self._entry(key)
            entry.cooldown_multiplier = min(entry.cooldown_multiplier * 2, self._max_multiplier)
            return entry.cooldown_multiplier

    def reset_cooldown(self, key: str) -> None:
        with self._lock(key):
            self._entry(key).cooldown_multiplier = 1

    def cooldown_for(self, multiplier: int) -> timedelta:
        """Backoff interval for a multiplier: min(ceiling, 1s x multiplier)."""
        return min(self._max_cooldown, BASE_COOLDOWN * multiplier)

    def cooldown_interval(self, key: str) -> timedelta:
        """Current backoff interval of a channel; the base interval for unknown ones."""
        status = self.peek(key)
        return self.cooldown_for(status.cooldown_multiplier if status is not None else 1)

    def remaining_cooldown(self, key: str) -> float:
        """Seconds left in the channel's cooldown window, 0 when not cooling down."""
        status = self.peek(key)
        if status is None or status.last_checked_at is None:
            return 0.0
        interval = self.cooldown_for(status.cooldown_multiplier)
        elapsed = self._clock() - status.last_checked_at
        if elapsed > interval:
            return 0.0
        return max((interval - elapsed).total_seconds(), 0.0)

    def is_cooling_down(self, key: str) -> bool:
        """Whether a resolution attempt must be refused for now."""
        status = self.peek(key)
        if status is None or status.last_checked_at is None:
            return False
        elapsed = self._clock() - status.last_checked_at
        return elapsed <= self.cooldown_for(status.cooldown_multiplier)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
