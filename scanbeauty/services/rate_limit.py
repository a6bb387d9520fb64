"""
Fixed-window, in-process rate limiter for the AI endpoints.
"""

import time
from dataclasses import dataclass
from typing import Callable, Optional


@dataclass
class RateLimitDecision:
    allowed: bool
    retry_after: int = 0


class RateLimiter:
    def __init__(self, limit: int, window_seconds: int, clock: Callable[[], float] = time.monotonic):
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, tuple[int, float]] = {}

    @property
    def tracked_keys(self) -> int:
        return len(self._windows)

    def _prune(self, now: float) -> None:
        expired = [key for key, (_, reset_at) in self._windows.items() if reset_at <= now]
        for key in expired:
            del self._windows[key]

    def check(self, key: str) -> RateLimitDecision:
        now = self._clock()
        self._prune(now)
        count, reset_at = self._windows.get(key, (0, now + self.window_seconds))

        if count >= self.limit:
            return RateLimitDecision(allowed=False, retry_after=max(1, int(reset_at - now)))

        self._windows[key] = (count + 1, reset_at)
        return RateLimitDecision(allowed=True)

    def reset(self, key: Optional[str] = None) -> None:
        if key is None:
            self._windows.clear()
        else:
            self._windows.pop(key, None)
