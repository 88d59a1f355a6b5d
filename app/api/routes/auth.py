from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response

from app.api.dependencies import get_auth_service
from app.core.rate_limit import AUTH_PRESET, rate_limited
from app.core.request_body import json_payload
from app.core.session import clear_sessions, optional_user_id, set_user_session
from app.schemas.users import (
    CurrentUserResponse,
    LoginRequest,
    LoginResponse,
    SuccessResponse,
    UserProfile,
    UserSummary,
)
from app.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    dependencies=[Depends(rate_limited(AUTH_PRESET))],
)
async def login(
    response: Response,
    payload: Annotated[LoginRequest, Depends(json_payload(LoginRequest))],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> LoginResponse:
    """Verify credentials and open a one-hour session.

    Raises:
        ValidationAppError: 400 for a non-JSON or incomplete body.
        AuthenticationAppError: 401 for unknown user or wrong password.
        RateLimitAppError: 429 once the auth preset budget is spent.
    """
    user = await service.login(payload)
    set_user_session(response, user.id)
    return LoginResponse(user=UserSummary.from_record(user))


@router.post("/logout", response_model=SuccessResponse)
async def logout(response: Response) -> SuccessResponse:
    """Clear the user session and any key-validation session."""
    clear_sessions(response)
    return SuccessResponse()


@router.get("/me", response_model=CurrentUserResponse)
async def me(
    user_id: Annotated[str | None, Depends(optional_user_id)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> CurrentUserResponse:
    """Return the signed-in user, or ``{"user": null}``.

    This endpoint never reports an error to the client.
    """
    try:
        user = await service.current_user(user_id)
    except Exception as exc:
        logger.warning("auth.me_lookup_failed", extra={"error_type": type(exc).__name__})
        return CurrentUserResponse(user=None)

    if user is None:
        return CurrentUserResponse(user=None)
    return CurrentUserResponse(user=UserProfile.from_record(user))
