"""Per-user API key management.

Admission order for write routes: content type, body parse, field
validation, path id check, session authentication, then ownership in the
service layer.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status

from app.api.dependencies import get_api_key_service, valid_key_id
from app.core.request_body import json_payload
from app.core.session import require_user_id
from app.schemas.api_keys import (
    ApiKeyCreateRequest,
    ApiKeyResponse,
    ApiKeyUpdateRequest,
)
from app.schemas.users import SuccessResponse
from app.services.api_key_service import ApiKeyService

router = APIRouter(prefix="/api-keys", tags=["API Keys"])

UserId = Annotated[str, Depends(require_user_id)]
Service = Annotated[ApiKeyService, Depends(get_api_key_service)]
KeyId = Annotated[str, Depends(valid_key_id)]


@router.get("", response_model=list[ApiKeyResponse], response_model_exclude_none=True)
async def list_api_keys(user_id: UserId, service: Service) -> list[ApiKeyResponse]:
    """List the caller's keys, newest first, including full key values."""
    records = await service.list_keys(user_id)
    return [ApiKeyResponse.from_record(r) for r in records]


@router.post(
    "",
    response_model=ApiKeyResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_api_key(
    payload: Annotated[ApiKeyCreateRequest, Depends(json_payload(ApiKeyCreateRequest))],
    user_id: UserId,
    service: Service,
) -> ApiKeyResponse:
    """Create a key owned by the caller.

    Raises:
        ValidationAppError: 400 for invalid fields.
        AuthenticationAppError: 401 without a valid session.
        AuthorizationAppError: 403 when the caller is at the key cap.
    """
    record = await service.create_key(user_id, payload)
    return ApiKeyResponse.from_record(record)


@router.patch("/{key_id}", response_model=ApiKeyResponse, response_model_exclude_none=True)
async def update_api_key(
    payload: Annotated[ApiKeyUpdateRequest, Depends(json_payload(ApiKeyUpdateRequest))],
    key_id: KeyId,
    user_id: UserId,
    service: Service,
) -> ApiKeyResponse:
    """Update any subset of name, description, key, isActive and lastUsed."""
    record = await service.update_key(user_id, key_id, payload)
    return ApiKeyResponse.from_record(record)


@router.delete("/{key_id}", response_model=SuccessResponse)
async def delete_api_key(key_id: KeyId, user_id: UserId, service: Service) -> SuccessResponse:
    await service.delete_key(user_id, key_id)
    return SuccessResponse()
