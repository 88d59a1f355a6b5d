"""Shared FastAPI dependencies for the route modules.

Services are built once per app in the factory and read from ``app.state``.
"""

from __future__ import annotations

from fastapi import Path, Request

from app.core.errors import ValidationAppError
from app.services.api_key_service import ApiKeyService
from app.services.auth_service import AuthService
from app.utils.validators import is_valid_uuid


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_api_key_service(request: Request) -> ApiKeyService:
    return request.app.state.api_key_service


async def valid_key_id(key_id: str = Path(...)) -> str:
    """Reject path ids that are not UUIDs before any store lookup."""
    if not is_valid_uuid(key_id):
        raise ValidationAppError(code="invalid_api_key_id", message="Invalid API key ID.")
    return key_id
