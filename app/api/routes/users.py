from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from app.api.dependencies import get_auth_service
from app.core.rate_limit import AUTH_PRESET, rate_limited
from app.core.request_body import json_payload
from app.core.session import set_user_session
from app.schemas.users import SignupRequest, SignupResponse, UserProfile
from app.services.auth_service import AuthService

router = APIRouter(tags=["Users"])


@router.post(
    "/users",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limited(AUTH_PRESET))],
)
async def signup(
    response: Response,
    payload: Annotated[SignupRequest, Depends(json_payload(SignupRequest))],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> SignupResponse:
    """Register a new account and sign it in.

    Raises:
        ValidationAppError: 400 for malformed username/password.
        ConflictAppError: 409 if the username is taken.
        RateLimitAppError: 429 once the auth preset budget is spent.
    """
    user = await service.signup(payload)
    set_user_session(response, user.id)
    return SignupResponse(user=UserProfile.from_record(user))
