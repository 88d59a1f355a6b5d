"""Rate limiter interfaces.

The HTTP layer depends on this abstraction (not the concrete implementation)
so the process-local table can later be swapped for a shared counter (e.g.
Redis) without touching the routes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitPolicy:
    """A window size and request cap applied to one class of endpoints.

    Attributes:
        name: Preset name, also used to namespace limiter keys.
        window_ms: Window length in milliseconds.
        max_requests: Requests allowed per window.
    """

    name: str
    window_ms: int
    max_requests: int


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit check.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Max requests per window.
        remaining: Remaining requests in the current window (0 when blocked).
        reset_at: UNIX epoch milliseconds when the current window ends.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    def check(
        self,
        identifier: str,
        *,
        window_ms: int,
        max_requests: int,
        now: int | None = None,
    ) -> RateLimitResult:
        """Count one request for ``identifier`` and decide whether it may pass.

        Args:
            identifier: Client key (e.g. namespaced IP address).
            window_ms: Window length in milliseconds.
            max_requests: Requests allowed per window.
            now: Current time in epoch milliseconds; read from the clock if omitted.

        Returns:
            RateLimitResult describing whether it was allowed. Never raises
            for a denied request.
        """
        raise NotImplementedError

    @abstractmethod
    def reset(self) -> None:
        """Drop all counters."""
        raise NotImplementedError
