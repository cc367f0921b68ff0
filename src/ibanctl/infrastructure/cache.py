"""Time-bounded in-memory response cache.

``get`` is the source of truth for expiry: an entry whose TTL has elapsed
is evicted on lookup and reported as absent. The optional janitor thread
only reclaims memory for keys nobody asks for again.

INVARIANT: An entry is never returned after its TTL (if nonzero) elapsed.
INVARIANT: All access to the mapping happens under one lock, so concurrent
readers see either the old or the new value, never a partial one.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

NO_EXPIRY = 0.0


@dataclass(frozen=True)
class CacheEntry:
    """A stored value with its insertion time and time-to-live (seconds)."""

    value: Any
    inserted_at: float
    ttl: float = NO_EXPIRY

    def expired(self, now: float) -> bool:
        return self.ttl > 0 and now - self.inserted_at >= self.ttl


class ResponseCache:
    """Thread-safe key/value store with lazy per-entry expiry.

    Args:
        clock: Monotonic time source in seconds. Tests inject a fake clock.
    """

    def __init__(self, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._janitor: threading.Thread | None = None
        self._janitor_stop = threading.Event()

    def get(self, key: str) -> tuple[Any, bool]:
        """Return ``(value, True)`` for a live entry, ``(None, False)`` otherwise."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None, False
            if entry.expired(self._clock()):
                del self._entries[key]
                return None, False
            return entry.value, True

    def set(self, key: str, value: Any, ttl: float = NO_EXPIRY) -> None:
        """Store *value* under *key*; ``ttl == 0`` means it never expires."""
        if ttl < 0:
            msg = f"ttl must be >= 0, got {ttl}"
            raise ValueError(msg)
        entry = CacheEntry(value=value, inserted_at=self._clock(), ttl=ttl)
        with self._lock:
            self._entries[key] = entry

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def delete_expired(self) -> int:
        """Evict every expired entry. Returns the number of entries removed."""
        with self._lock:
            now = self._clock()
            expired = [key for key, entry in self._entries.items() if entry.expired(now)]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    # ------------------------------------------------------------------
    # Background sweep
    # ------------------------------------------------------------------

    def start_janitor(self, interval: float) -> None:
        """Sweep expired entries every *interval* seconds on a daemon thread.

        No-op when *interval* is not positive or a janitor is already running.
        """
        if interval <= 0 or self._janitor is not None:
            return
        self._janitor_stop.clear()
        self._janitor = threading.Thread(
            target=self._sweep_loop,
            args=(interval,),
            name="ibanctl-cache-janitor",
            daemon=True,
        )
        self._janitor.start()

    def stop_janitor(self) -> None:
        if self._janitor is None:
            return
        self._janitor_stop.set()
        self._janitor.join()
        self._janitor = None

    def _sweep_loop(self, interval: float) -> None:
        while not self._janitor_stop.wait(interval):
            removed = self.delete_expired()
            if removed:
                logger.debug("Evicted %d expired cache entries", removed)
