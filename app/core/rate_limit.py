"""Rate limiting dependency for FastAPI routes.

This module wires the rate limiting adapter into the HTTP layer.

Design goals:
- Minimal coupling: API routes depend on a dependency function only.
- Swap-friendly: the limiter lives on ``app.state`` behind an abstract
  interface, so each app instance (and each test) owns its own table.
- Policy, not mechanism: presets only choose a window and a cap.

Rate limiting strategy:
- Fixed window per client network identifier, namespaced by preset.
- The identifier is the first X-Forwarded-For entry, else X-Real-IP, else
  "unknown".
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from fastapi import Request, Response

from app.adapters.rate_limit.base import (
    AbstractRateLimiter,
    RateLimitPolicy,
    RateLimitResult,
)
from app.core.config import RateLimitSettings, settings
from app.core.errors import RateLimitAppError
from app.core.logging import hash_for_log

logger = logging.getLogger(__name__)

AUTH_PRESET = "auth"
API_PRESET = "api"


def build_policies(cfg: RateLimitSettings | None = None) -> dict[str, RateLimitPolicy]:
    """Return the named presets from configuration.

    Authentication endpoints default to 5 requests/minute, general API
    endpoints to 60 requests/minute.
    """
    cfg = cfg or settings.rate_limit
    return {
        AUTH_PRESET: RateLimitPolicy(
            name=AUTH_PRESET,
            window_ms=cfg.auth_window_ms,
            max_requests=cfg.auth_max_requests,
        ),
        API_PRESET: RateLimitPolicy(
            name=API_PRESET,
            window_ms=cfg.api_window_ms,
            max_requests=cfg.api_max_requests,
        ),
    }


def get_client_identifier(request: Request) -> str:
    """Derive the caller's network identifier from proxy headers."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    return "unknown"


def rate_limit_headers(result: RateLimitResult) -> dict[str, str]:
    return {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": str(result.reset_at),
    }


def get_rate_limiter(request: Request) -> AbstractRateLimiter:
    return request.app.state.rate_limiter


def rate_limited(preset: str) -> Callable[[Request, Response], Awaitable[None]]:
    """Build a dependency enforcing the named preset.

    On success the X-RateLimit-* headers are copied onto the outgoing
    response; on denial a RateLimitAppError (HTTP 429) carries them together
    with a fixed Retry-After.

    Usage:
        @router.post("/login", dependencies=[Depends(rate_limited(AUTH_PRESET))])
    """

    async def enforce_rate_limit(request: Request, response: Response) -> None:
        if not settings.rate_limit.enabled:
            return

        policy: RateLimitPolicy = request.app.state.rate_limit_policies[preset]
        identifier = get_client_identifier(request)
        result = get_rate_limiter(request).check(
            f"{policy.name}:{identifier}",
            window_ms=policy.window_ms,
            max_requests=policy.max_requests,
        )
        headers = rate_limit_headers(result)

        if result.allowed:
            logger.debug(
                "rate_limit.allowed",
                extra={
                    "preset": policy.name,
                    "client_hash": hash_for_log(identifier),
                    "limit": result.limit,
                    "remaining": result.remaining,
                },
            )
            response.headers.update(headers)
            return

        logger.warning(
            "rate_limit.exceeded",
            extra={
                "preset": policy.name,
                "client_hash": hash_for_log(identifier),
                "limit": result.limit,
                "reset_at": result.reset_at,
            },
        )
        headers["Retry-After"] = str(settings.rate_limit.retry_after_seconds)
        raise RateLimitAppError(
            code="rate_limited",
            message="Too many requests. Please try again later.",
            details={
                "limit": result.limit,
                "remaining": result.remaining,
                "reset": result.reset_at,
            },
            headers=headers,
        )

    return enforce_rate_limit
