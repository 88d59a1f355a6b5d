from __future__ import annotations

from app.api.routes.api_keys import router as api_keys_router
from app.api.routes.auth import router as auth_router
from app.api.routes.health import router as health_router
from app.api.routes.playground import router as playground_router
from app.api.routes.users import router as users_router

__all__ = [
    "api_keys_router",
    "auth_router",
    "health_router",
    "playground_router",
    "users_router",
]
