"""Sliding-window rate limiting for upstream providers."""

import time
from collections import deque
from typing import Callable, Deque, Dict, Optional


class RateLimiter:
    """
    Tracks recent calls to one provider within a sliding window.

    The limiter never blocks: callers check ``can_proceed()`` and either
    wait ``time_until_next_slot()`` seconds or skip the call.
    """

    def __init__(
        self,
        max_calls: int = 30,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_calls = max_calls
        self.window_seconds = window_seconds
        self._clock = clock
        self._calls: Deque[float] = deque()

    def _prune(self, now: float) -> None:
        cutoff = now - self.window_seconds
        while self._calls and self._calls[0] <= cutoff:
            self._calls.popleft()

    def can_proceed(self) -> bool:
        """Check whether a new call fits in the current window."""
        self._prune(self._clock())
        return len(self._calls) < self.max_calls

    def record(self) -> None:
        """Record a call made now."""
        now = self._clock()
        self._prune(now)
        self._calls.append(now)

    def time_until_next_slot(self) -> float:
        """Seconds until a call would be permitted (0 if permitted now)."""
        now = self._clock()
        self._prune(now)
        if len(self._calls) < self.max_calls:
            return 0.0
        return max(0.0, self._calls[0] + self.window_seconds - now)

    @property
    def recent_calls(self) -> int:
        self._prune(self._clock())
        return len(self._calls)

    def __repr__(self) -> str:
        return f"<RateLimiter {len(self._calls)}/{self.max_calls} per {self.window_seconds:g}s>"


class RateLimiterRegistry:
    """
    Provider-keyed collection of rate limiters.

    Create one registry per process and pass it to every request so that
    call history survives across requests.
    """

    def __init__(
        self,
        max_calls: int = 30,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_calls = max_calls
        self.window_seconds = window_seconds
        self._clock = clock
        self._limiters: Dict[str, RateLimiter] = {}

    def get(self, provider: str, max_calls: Optional[int] = None) -> RateLimiter:
        """Get or create the limiter for a provider."""
        key = provider.lower()
        limiter = self._limiters.get(key)
        if limiter is None:
            limiter = RateLimiter(
                max_calls=max_calls or self.max_calls,
                window_seconds=self.window_seconds,
                clock=self._clock,
            )
            self._limiters[key] = limiter
        return limiter

    def providers(self):
        return list(self._limiters.keys())
