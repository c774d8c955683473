"""
Fixed-window request counter per caller id (in-process only).
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable

# Closed windows are swept once this many callers are being tracked.
MAX_TRACKED_IDS = 10_000


@dataclass(frozen=True)
class RateLimitDecision:
    limited: bool
    remaining: int
    reset_ms: float


class RateLimiter:
    """Allows ``max_requests`` per ``window_ms`` for each id."""

    def __init__(
        self,
        max_requests: int = 120,
        window_ms: int = 60_000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_ms = window_ms
        self._clock = clock
        self._counters: dict[str, tuple[float, int]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._counters)

    def hit(self, caller_id: str) -> RateLimitDecision:
        """Count one request for ``caller_id`` and report whether it is allowed."""
        now = self._clock() * 1000
        with self._lock:
            if len(self._counters) >= MAX_TRACKED_IDS:
                self._purge_expired(now)

            record = self._counters.get(caller_id)
            if record is None or now - record[0] > self.window_ms:
                self._counters[caller_id] = (now, 1)
                return RateLimitDecision(False, self.max_requests - 1, self.window_ms)

            window_start, count = record
            count += 1
            self._counters[caller_id] = (window_start, count)
            reset_ms = self.window_ms - (now - window_start)

            if count > self.max_requests:
                return RateLimitDecision(True, 0, reset_ms)
            return RateLimitDecision(False, max(0, self.max_requests - count), reset_ms)

    def _purge_expired(self, now: float) -> None:
        expired = [k for k, (start, _) in self._counters.items() if now - start > self.window_ms]
        for key in expired:
            del self._counters[key]
