"""In-process sliding-window rate guard.

State lives in this process only: it resets on cold start and is not shared
between concurrent Lambda instances, so the effective limit scales with the
instance count. It deters casual abuse; it does not enforce a quota.
"""

import time
from collections import deque
from collections.abc import Callable


class RateGuard:
    def __init__(self, limit: int = 20, window_seconds: float = 60.0, clock: Callable[[], float] = time.monotonic):
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._last_sweep: float | None = None

    def _sweep(self, now: float) -> None:
        # Drop keys whose newest hit has left the window.
        stale = [k for k, hits in self._hits.items() if not hits or now - hits[-1] >= self.window_seconds]
        for key in stale:
            del self._hits[key]
        self._last_sweep = now

    def check(self, key: str) -> bool:
        """Record a request for ``key``; True while within the limit."""
        now = self._clock()
        if self._last_sweep is None or now - self._last_sweep >= self.window_seconds:
            self._sweep(now)
        hits = self._hits.setdefault(key, deque())
        while hits and now - hits[0] >= self.window_seconds:
            hits.popleft()
        hits.append(now)
        return len(hits) <= self.limit

    def reset(self) -> None:
        self._hits.clear()
        self._last_sweep = None
