"""Unit tests for in-memory rate limiter adapter."""

from unittest.mock import Mock

import pytest

from app.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter

WINDOW_MS = 60_000


def test_first_request_opens_window() -> None:
    limiter = InMemoryFixedWindowRateLimiter()

    result = limiter.check("k", window_ms=WINDOW_MS, max_requests=5, now=1_000)

    assert result.allowed is True
    assert result.limit == 5
    assert result.remaining == 4
    assert result.reset_at == 1_000 + WINDOW_MS


def test_sixth_request_in_window_is_blocked() -> None:
    limiter = InMemoryFixedWindowRateLimiter()

    for expected_remaining in (4, 3, 2, 1, 0):
        result = limiter.check("k", window_ms=WINDOW_MS, max_requests=5, now=1_000)
        assert result.allowed is True
        assert result.remaining == expected_remaining

    blocked = limiter.check("k", window_ms=WINDOW_MS, max_requests=5, now=1_500)
    assert blocked.allowed is False
    assert blocked.remaining == 0
    assert blocked.reset_at == 1_000 + WINDOW_MS


def test_request_at_reset_time_starts_fresh_window() -> None:
    limiter = InMemoryFixedWindowRateLimiter()
    for _ in range(6):
        limiter.check("k", window_ms=WINDOW_MS, max_requests=5, now=1_000)

    fresh = limiter.check("k", window_ms=WINDOW_MS, max_requests=5, now=1_000 + WINDOW_MS)

    assert fresh.allowed is True
    assert fresh.remaining == 4
    assert fresh.reset_at == 1_000 + 2 * WINDOW_MS


def test_uses_clock_when_now_omitted() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryFixedWindowRateLimiter(clock=clock)

    assert limiter.check("k", window_ms=10_000, max_requests=1).allowed is True
    assert limiter.check("k", window_ms=10_000, max_requests=1).allowed is False

    clock.return_value = 1010.0
    result = limiter.check("k", window_ms=10_000, max_requests=1)
    assert result.allowed is True
    assert result.reset_at == 1_020_000


def test_isolated_by_identifier() -> None:
    limiter = InMemoryFixedWindowRateLimiter()

    assert limiter.check("k1", window_ms=WINDOW_MS, max_requests=1, now=0).allowed is True
    assert limiter.check("k1", window_ms=WINDOW_MS, max_requests=1, now=0).allowed is False

    assert limiter.check("k2", window_ms=WINDOW_MS, max_requests=1, now=0).allowed is True


def test_expired_entries_are_purged() -> None:
    limiter = InMemoryFixedWindowRateLimiter()
    limiter.check("a", window_ms=1_000, max_requests=5, now=0)
    limiter.check("b", window_ms=1_000, max_requests=5, now=0)
    assert len(limiter) == 2

    limiter.check("c", window_ms=1_000, max_requests=5, now=5_000)

    assert len(limiter) == 1


def test_reset_clears_counters() -> None:
    limiter = InMemoryFixedWindowRateLimiter()
    limiter.check("k", window_ms=WINDOW_MS, max_requests=1, now=0)

    limiter.reset()

    assert len(limiter) == 0
    assert limiter.check("k", window_ms=WINDOW_MS, max_requests=1, now=0).allowed is True


@pytest.mark.parametrize(
    "kwargs",
    [
        {"window_ms": 0, "max_requests": 5},
        {"window_ms": 1_000, "max_requests": 0},
    ],
)
def test_invalid_policy_args(kwargs: dict) -> None:
    limiter = InMemoryFixedWindowRateLimiter()

    with pytest.raises(ValueError):
        limiter.check("k", now=0, **kwargs)
