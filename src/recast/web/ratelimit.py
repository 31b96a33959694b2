"""Per-client request limiting for the HTTP API."""

from __future__ import annotations

import time
from collections import deque
from threading import Lock


class RateLimiter:
    """Sliding-window limiter: at most ``max_requests`` per ``window`` seconds per key.

    Clients with no request inside the window are forgotten, at most once
    per window, so the map only holds recently active clients.
    """

    def __init__(self, max_requests: int, window: float) -> None:
        self._max = max_requests
        self._window = window
        self._lock = Lock()
        self._hits: dict[str, deque[float]] = {}
        self._last_sweep: float | None = None

    def hit(self, key: str, now: float | None = None) -> tuple[bool, float]:
        """Record a request for ``key``.

        Returns:
            Tuple of (allowed, seconds_until_a_slot_frees_up).
        """
        now = time.monotonic() if now is None else now
        cutoff = now - self._window
        with self._lock:
            if self._last_sweep is None:
                self._last_sweep = now
            elif now - self._last_sweep >= self._window:
                self._sweep(cutoff)
                self._last_sweep = now

            hits = self._hits.setdefault(key, deque())
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if len(hits) >= self._max:
                return False, self._window - (now - hits[0])
            hits.append(now)
            return True, 0.0

    def _sweep(self, cutoff: float) -> None:
        stale = [key for key, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for key in stale:
            del self._hits[key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._hits)
