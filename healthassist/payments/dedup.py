"""Bounded, time-limited record of checkout sessions already acted on."""

import threading
import time
from collections import OrderedDict
from typing import Callable


class SessionDeduplicator:
    """Claim-once set keyed by payment session id.

    A key is claimed before booking, marked complete on success, and
    released on failure so a later redelivery can try again. Entries expire
    after ``ttl_seconds``; the oldest are evicted beyond ``max_entries``.
    """

    def __init__(
        self,
        ttl_seconds: float,
        max_entries: int,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._expires_at: "OrderedDict[str, float]" = OrderedDict()
        self._lock = threading.Lock()

    def claim(self, key: str) -> bool:
        """Return True if the caller now owns ``key``; False if it was seen already."""
        with self._lock:
            now = self._clock()
            self._prune(now)
            if key in self._expires_at:
                return False
            self._expires_at[key] = now + self.ttl_seconds
            while len(self._expires_at) > self.max_entries:
                self._expires_at.popitem(last=False)
            return True

    def complete(self, key: str) -> None:
        """Keep ``key`` for a full retention window from now."""
        with self._lock:
            self._expires_at[key] = self._clock() + self.ttl_seconds
            self._expires_at.move_to_end(key)

    def release(self, key: str) -> None:
        with self._lock:
            self._expires_at.pop(key, None)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            self._prune(self._clock())
            return key in self._expires_at

    def __len__(self) -> int:
        with self._lock:
            return len(self._expires_at)

    def _prune(self, now: float) -> None:
        # Insertion order tracks expiry order because every write uses the same TTL.
        while self._expires_at:
            key, expires_at = next(iter(self._expires_at.items()))
            if expires_at > now:
                break
            del self._expires_at[key]
