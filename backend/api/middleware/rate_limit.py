"""
Sliding-window rate limiting.

Each limiter keeps, per client IP, the timestamps of recent requests in an
injectable store. Everything happens in memory inside one event-loop turn:
no I/O and no awaits between reading and writing a key.

Usage:
    login_limit = rate_limit(15 * 60 * 1000, 10, "Too many login attempts")

    @router.post("/login", dependencies=[Depends(login_limit)])
    async def login(...): ...
"""

import math
import random
import time
import weakref
from typing import Callable, Optional, Protocol

from fastapi import Request

from shared.exceptions import RateLimitError

UNKNOWN_CLIENT = "unknown"


class RateLimitStore(Protocol):
    """Per-key storage of request timestamps (milliseconds)."""

    def get(self, key: str) -> Optional[list[float]]:
        ...

    def set(self, key: str, timestamps: list[float]) -> None:
        ...

    def delete(self, key: str) -> None:
        ...

    def keys(self) -> list[str]:
        ...


class InMemoryRateLimitStore:
    """Process-local store. Not shared between workers, lost on restart."""

    def __init__(self) -> None:
        self._data: dict[str, list[float]] = {}

    def get(self, key: str) -> Optional[list[float]]:
        return self._data.get(key)

    def set(self, key: str, timestamps: list[float]) -> None:
        self._data[key] = timestamps

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)

    def clear(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)


def _now_ms() -> float:
    return time.monotonic() * 1000


class RateLimiter:
    """
    Approximate sliding-window limiter.

    Allows at most max_requests per key in any trailing window_ms. Empty
    keys are evicted by an occasional full sweep (with probability
    cleanup_probability per request) rather than on every request.
    """

    def __init__(
        self,
        window_ms: int,
        max_requests: int,
        message: str = "Too many requests",
        store: Optional[RateLimitStore] = None,
        clock: Callable[[], float] = _now_ms,
        rand: Callable[[], float] = random.random,
        cleanup_probability: float = 0.05,
    ):
        if window_ms <= 0 or max_requests <= 0:
            raise ValueError("window_ms and max_requests must be positive")
        self.window_ms = window_ms
        self.max_requests = max_requests
        self.message = message
        self.store = store if store is not None else InMemoryRateLimitStore()
        self._clock = clock
        self._rand = rand
        self._cleanup_probability = cleanup_probability

    def hit(self, key: str) -> None:
        """
        Count a request for key.

        Raises:
            RateLimitError: If the key already used its quota in the window
        """
        now = self._clock()
        window_start = now - self.window_ms

        recent = [t for t in (self.store.get(key) or []) if t > window_start]
        if len(recent) >= self.max_requests:
            retry_after = math.ceil((recent[0] + self.window_ms - now) / 1000)
            self.store.set(key, recent)
            raise RateLimitError(self.message, retry_after=retry_after)

        recent.append(now)
        self.store.set(key, recent)

        if self._rand() < self._cleanup_probability:
            self.sweep(now)

    def sweep(self, now: Optional[float] = None) -> None:
        """Prune every key and evict those left empty."""
        now = self._clock() if now is None else now
        window_start = now - self.window_ms
        for key in self.store.keys():
            recent = [t for t in (self.store.get(key) or []) if t > window_start]
            if recent:
                self.store.set(key, recent)
            else:
                self.store.delete(key)

    def reset(self) -> None:
        for key in self.store.keys():
            self.store.delete(key)

    async def __call__(self, request: Request) -> None:
        """FastAPI dependency: limit by client IP."""
        host = request.client.host if request.client else None
        self.hit(host or UNKNOWN_CLIENT)


_limiters: "weakref.WeakSet[RateLimiter]" = weakref.WeakSet()


def rate_limit(
    window_ms: int,
    max_requests: int,
    message: str = "Too many requests",
    store: Optional[RateLimitStore] = None,
) -> RateLimiter:
    """
    Create a rate-limit dependency.

    Args:
        window_ms: Length of the trailing window in milliseconds
        max_requests: Requests allowed per client within the window
        message: Message returned with the 429 response
        store: Optional store; defaults to a fresh in-memory one
    """
    limiter = RateLimiter(window_ms, max_requests, message, store=store)
    _limiters.add(limiter)
    return limiter


def reset_rate_limiters() -> None:
    """Clear the state of every limiter created by rate_limit() (tests)."""
    for limiter in list(_limiters):
        limiter.reset()
