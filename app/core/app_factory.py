from __future__ import annotations

"""Application factory for FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) and
owns the lifetime of stateful components: each app instance gets its own
rate limiter table and credential store, so tests never share counters.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.adapters.rate_limit import AbstractRateLimiter, InMemoryFixedWindowRateLimiter
from app.adapters.store import AbstractCredentialStore, create_store
from app.api.routes import (
    api_keys_router,
    auth_router,
    health_router,
    playground_router,
    users_router,
)
from app.core.config import settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware
from app.core.openapi import apply_openapi_customizations
from app.core.rate_limit import build_policies
from app.services.api_key_service import ApiKeyService
from app.services.auth_service import AuthService


def create_app(
    *,
    store: AbstractCredentialStore | None = None,
    rate_limiter: AbstractRateLimiter | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        store: Credential store to use; built from settings when omitted.
        rate_limiter: Limiter to use; a fresh in-memory one when omitted.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.

    Raises:
        ConfigurationAppError: If the configured store backend is incomplete.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    if store is None:
        store = create_store(settings.store)
    if rate_limiter is None:
        rate_limiter = InMemoryFixedWindowRateLimiter()

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        await store.close()

    app = FastAPI(
        title="API Key Manager",
        description=(
            "Multi-tenant API key management: register or log in, then create, "
            "list, update, deactivate and delete API keys scoped to your account. "
            "A playground endpoint validates a key and unlocks a protected resource."
        ),
        version="0.1.0",
        debug=settings.app.debug,
        lifespan=lifespan,
    )

    app.state.store = store
    app.state.rate_limiter = rate_limiter
    app.state.rate_limit_policies = build_policies(settings.rate_limit)
    app.state.auth_service = AuthService(store, bcrypt_rounds=settings.app.bcrypt_rounds)
    app.state.api_key_service = ApiKeyService(
        store, max_keys=settings.app.max_api_keys_per_user
    )

    # Middleware
    app.middleware("http")(request_id_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(api_keys_router)
    app.include_router(playground_router)
    app.include_router(health_router)

    # OpenAPI customizations (cookie security scheme, tags)
    apply_openapi_customizations(app)

    return app
