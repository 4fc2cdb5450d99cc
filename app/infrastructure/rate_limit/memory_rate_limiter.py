import time
from collections import deque
from threading import Lock
from typing import Callable, Deque, Dict

from ...application.ports.rate_limiter import RateLimiter


class InMemoryRateLimiter(RateLimiter):
    """Sliding window per key. Process-local, so only suitable for a single worker."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._hits: Dict[str, Deque[float]] = {}
        self._lock = Lock()
        self._clock = clock
        self._last_sweep = clock()

    def allow(self, key: str, max_requests: int, window_seconds: int) -> bool:
        now = self._clock()
        with self._lock:
            if now - self._last_sweep >= window_seconds:
                self._sweep(now - window_seconds)
                self._last_sweep = now
            hits = self._hits.setdefault(key, deque())
            while hits and hits[0] <= now - window_seconds:
                hits.popleft()
            if len(hits) >= max_requests:
                return False
            hits.append(now)
            return True

    def _sweep(self, cutoff: float) -> None:
        # drop keys whose every hit has left the window
        for key in list(self._hits):
            hits = self._hits[key]
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if not hits:
                del self._hits[key]

    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._hits)
