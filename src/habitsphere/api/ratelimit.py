"""
Sliding-window rate limiter for registration-class endpoints.

Keeps a log of request timestamps per client key; a request is admitted
only if fewer than max_requests fall inside the trailing window.
At most once per window, allow() drops keys with no hit left inside it,
so the table only holds clients seen in the last window.
"""

import threading
import time
from collections import deque
from collections.abc import Callable


class SlidingWindowRateLimiter:
    """In-process limiter keyed by client identifier (usually the remote address)."""

    def __init__(
        self,
        max_requests: int = 5,
        window_seconds: float = 900.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def allow(self, key: str) -> bool:
        """Record a request for key and report whether it is within the limit."""
        now = self._clock()
        cutoff = now - self.window_seconds
        with self._lock:
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(cutoff)
                self._last_sweep = now
            hits = self._hits.setdefault(key, deque())
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if len(hits) >= self.max_requests:
                return False
            hits.append(now)
            return True

    def _sweep(self, cutoff: float) -> int:
        """Drop every key whose newest hit has left the window. Caller holds the lock."""
        stale = [key for key, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for key in stale:
            del self._hits[key]
        return len(stale)

    def __len__(self) -> int:
        """Number of client keys currently tracked."""
        with self._lock:
            return len(self._hits)

    def retry_after(self, key: str) -> int:
        """Seconds until the oldest hit in the window for key falls out."""
        with self._lock:
            hits = self._hits.get(key)
            if not hits:
                return 0
            return max(0, int(hits[0] + self.window_seconds - self._clock()) + 1)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()
