"""OpenAPI metadata and customization utilities.

Provides a helper to enrich the generated OpenAPI schema with:
- Tags metadata
- A cookie security scheme (``user_session``) applied to the API key
  management paths only

This keeps documentation concerns decoupled from the app factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

from app.core.session import USER_SESSION_COOKIE

SESSION_SCHEME = "SessionCookie"

_TAGS = [
    {"name": "Auth", "description": "Login, logout and current-user lookup."},
    {"name": "Users", "description": "Account registration."},
    {"name": "API Keys", "description": "Create, list, update and delete your API keys."},
    {"name": "Playground", "description": "Validate a key to unlock the protected resource."},
    {"name": "Health", "description": "Liveness checks."},
]


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add tags and cookie security.

    - Injects components.securitySchemes for the session cookie
    - Marks every ``/api-keys`` operation as requiring the session
    - Adds tags metadata if not present
    """

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        components = schema.setdefault("components", {})
        security_schemes = components.setdefault("securitySchemes", {})
        security_schemes.setdefault(
            SESSION_SCHEME,
            {
                "type": "apiKey",
                "in": "cookie",
                "name": USER_SESSION_COOKIE,
                "description": "Session cookie set by /auth/login or /users.",
            },
        )

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        for tag in _TAGS:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        for path, methods in schema.get("paths", {}).items():
            if not path.startswith("/api-keys"):
                continue
            for method_obj in methods.values():
                if isinstance(method_obj, dict):
                    method_obj["security"] = [{SESSION_SCHEME: []}]

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
