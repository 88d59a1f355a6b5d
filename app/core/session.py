"""Cookie-backed session accessor.

The session is the raw user id carried in the ``user_session`` cookie and is
trusted as-is once it has the shape of a UUID; lifetime is bounded only by
the cookie max-age. The playground flow uses a second cookie,
``api_key_session``, holding the literal ``"valid"``.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Cookie, Response

from app.core.config import settings
from app.core.errors import AuthenticationAppError
from app.utils.validators import is_valid_uuid

logger = logging.getLogger(__name__)

USER_SESSION_COOKIE = "user_session"
KEY_VALIDATION_COOKIE = "api_key_session"
KEY_VALIDATION_VALUE = "valid"


def _set_cookie(response: Response, name: str, value: str, max_age: int) -> None:
    response.set_cookie(
        key=name,
        value=value,
        max_age=max_age,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )


def set_user_session(response: Response, user_id: str) -> None:
    _set_cookie(response, USER_SESSION_COOKIE, user_id, settings.app.session_max_age_seconds)


def set_key_validation_session(response: Response) -> None:
    _set_cookie(
        response,
        KEY_VALIDATION_COOKIE,
        KEY_VALIDATION_VALUE,
        settings.app.key_validation_max_age_seconds,
    )


def clear_sessions(response: Response) -> None:
    """Expire both the user session and the key-validation cookie."""
    _set_cookie(response, USER_SESSION_COOKIE, "", 0)
    _set_cookie(response, KEY_VALIDATION_COOKIE, "", 0)


async def optional_user_id(
    user_session: Annotated[str | None, Cookie(alias=USER_SESSION_COOKIE)] = None,
) -> str | None:
    """Return the session user id when present and well-formed, else None."""
    if user_session and is_valid_uuid(user_session):
        return user_session
    return None


async def require_user_id(
    user_session: Annotated[str | None, Cookie(alias=USER_SESSION_COOKIE)] = None,
) -> str:
    """FastAPI dependency authenticating the caller from the session cookie.

    Raises:
        AuthenticationAppError: 401 if the cookie is missing or not a UUID.
    """
    if not user_session:
        raise AuthenticationAppError(code="unauthorized", message="Unauthorized")

    if not is_valid_uuid(user_session):
        logger.warning("session.invalid", extra={"cookie_length": len(user_session)})
        raise AuthenticationAppError(code="invalid_session", message="Invalid session.")

    return user_session


async def require_key_validation(
    api_key_session: Annotated[str | None, Cookie(alias=KEY_VALIDATION_COOKIE)] = None,
) -> None:
    """Gate for pages unlocked by a successful /validate-key call."""
    if api_key_session != KEY_VALIDATION_VALUE:
        raise AuthenticationAppError(
            code="key_validation_required",
            message="A valid API key is required to access this resource.",
        )
