"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
  This is a placeholder for a shared counter, not something to patch here.
- Thread-safe: uses a lock around shared state.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult


@dataclass
class _WindowEntry:
    count: int
    reset_time: int


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter counting requests per identifier in fixed windows.

    A window opens on the first request from an identifier and lasts
    ``window_ms``; it is not aligned to wall-clock boundaries. Expired entries
    are swept on every call, so the table stays bounded by the number of
    clients active within one window.
    """

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        """Initialize the limiter.

        Args:
            clock: Time source returning UNIX time in seconds.
        """
        self._clock = clock
        self._lock = threading.RLock()
        self._entries: dict[str, _WindowEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _purge_expired_locked(self, now: int) -> None:
        expired = [k for k, entry in self._entries.items() if entry.reset_time <= now]
        for key in expired:
            del self._entries[key]

    def check(
        self,
        identifier: str,
        *,
        window_ms: int,
        max_requests: int,
        now: int | None = None,
    ) -> RateLimitResult:
        """Count one request and return the allowance decision.

        Raises:
            ValueError: If window_ms or max_requests are not positive.
        """
        if window_ms < 1:
            raise ValueError("window_ms must be >= 1")
        if max_requests < 1:
            raise ValueError("max_requests must be >= 1")

        if now is None:
            now = self._now_ms()

        with self._lock:
            self._purge_expired_locked(now)

            entry = self._entries.get(identifier)
            if entry is None or now >= entry.reset_time:
                entry = _WindowEntry(count=1, reset_time=now + window_ms)
                self._entries[identifier] = entry
                return RateLimitResult(
                    allowed=True,
                    limit=max_requests,
                    remaining=max_requests - 1,
                    reset_at=entry.reset_time,
                )

            entry.count += 1
            if entry.count > max_requests:
                return RateLimitResult(
                    allowed=False,
                    limit=max_requests,
                    remaining=0,
                    reset_at=entry.reset_time,
                )

            return RateLimitResult(
                allowed=True,
                limit=max_requests,
                remaining=max_requests - entry.count,
                reset_at=entry.reset_time,
            )

    def reset(self) -> None:
        with self._lock:
            self._entries.clear()
