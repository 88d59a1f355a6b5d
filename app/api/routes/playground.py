"""Playground flow: validate an API key, then reach the gated resource."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response

from app.api.dependencies import get_api_key_service
from app.core.rate_limit import API_PRESET, rate_limited
from app.core.request_body import json_payload
from app.core.session import require_key_validation, set_key_validation_session
from app.schemas.api_keys import ValidateKeyRequest
from app.schemas.users import SuccessResponse
from app.services.api_key_service import ApiKeyService

router = APIRouter(tags=["Playground"])


@router.post(
    "/validate-key",
    response_model=SuccessResponse,
    dependencies=[Depends(rate_limited(API_PRESET))],
)
async def validate_key(
    response: Response,
    payload: Annotated[ValidateKeyRequest, Depends(json_payload(ValidateKeyRequest))],
    service: Annotated[ApiKeyService, Depends(get_api_key_service)],
) -> SuccessResponse:
    """Check a key against active keys and open a five-minute validation session.

    Raises:
        ValidationAppError: 400 for a missing or malformed key.
        AuthenticationAppError: 401 for an unknown or inactive key.
        RateLimitAppError: 429 once the api preset budget is spent.
    """
    await service.validate_key(payload)
    set_key_validation_session(response)
    return SuccessResponse()


@router.get("/protected", dependencies=[Depends(require_key_validation)])
async def protected() -> dict:
    """Resource reachable only with a current key-validation session."""
    return {
        "access": "granted",
        "message": "You have accessed a protected resource using a valid API key.",
    }
