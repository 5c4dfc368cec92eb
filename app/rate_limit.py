"""
Per-caller rate limiting for mutating requests.

Callers are named by an unauthenticated header, so the limiter must not
grow with every identity it has ever seen: a caller whose hits have all
left the window is forgotten.
"""

import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, Optional


@dataclass
class RateLimitResult:
    allowed: bool
    remaining: int
    retry_after: Optional[float] = None


class RateLimiter:
    """
    Sliding window limiter keyed by caller identity.

    Args:
        rpm: Maximum mutations per caller per window
        window_seconds: Window length in seconds
    """

    def __init__(self, rpm: int, window_seconds: int = 60):
        self._limit = max(1, rpm)
        self._window = window_seconds
        self._hits: Dict[str, Deque[float]] = {}
        self._last_sweep = 0.0
        self._lock = threading.Lock()

    def check(self, caller: str, now: Optional[float] = None) -> RateLimitResult:
        """Record a hit for caller if the window has room."""
        if now is None:
            now = time.time()
        horizon = now - self._window

        with self._lock:
            if now - self._last_sweep >= self._window:
                self._sweep(horizon)
                self._last_sweep = now

            hits = self._hits.get(caller)
            if hits is not None:
                while hits and hits[0] <= horizon:
                    hits.popleft()
            else:
                hits = self._hits[caller] = deque()

            if len(hits) >= self._limit:
                return RateLimitResult(
                    allowed=False,
                    remaining=0,
                    retry_after=max(0.0, hits[0] + self._window - now)
                )

            hits.append(now)
            return RateLimitResult(allowed=True, remaining=self._limit - len(hits))

    def _sweep(self, horizon: float) -> None:
        # a deque is ordered, so its newest hit decides whether the caller is idle
        idle = [caller for caller, hits in self._hits.items() if not hits or hits[-1] <= horizon]
        for caller in idle:
            del self._hits[caller]

    def __len__(self) -> int:
        """Number of callers currently tracked."""
        with self._lock:
            return len(self._hits)
