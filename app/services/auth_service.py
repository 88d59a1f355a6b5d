"""Account service: signup, credential verification and session lookup.

Password hashing is CPU-bound, so bcrypt calls run in the threadpool to keep
the event loop free. Login never reveals whether the username exists: an
unknown user and a wrong password produce the same AuthenticationAppError.
"""

from __future__ import annotations

import logging

from starlette.concurrency import run_in_threadpool

from app.adapters.store.base import AbstractCredentialStore, UserRecord
from app.core.errors import AuthenticationAppError, ConflictAppError
from app.core.logging import hash_for_log
from app.core.passwords import hash_password, verify_password
from app.schemas.users import LoginRequest, SignupRequest

logger = logging.getLogger(__name__)

_INVALID_CREDENTIALS = "Invalid username or password."


class AuthService:
    def __init__(self, store: AbstractCredentialStore, *, bcrypt_rounds: int = 10) -> None:
        self._store = store
        self._bcrypt_rounds = bcrypt_rounds

    async def signup(self, payload: SignupRequest) -> UserRecord:
        """Create an account for a username that is not yet taken.

        Raises:
            ConflictAppError: 409 if the username exists.
            StoreAppError: On store failure.
        """
        existing = await self._store.users.find_by_username(payload.username)
        if existing is not None:
            logger.info(
                "auth.signup_conflict",
                extra={"username_hash": hash_for_log(payload.username)},
            )
            raise ConflictAppError(
                code="username_taken",
                message="User already exists with this username.",
            )

        password_hash = await run_in_threadpool(
            hash_password, payload.password, rounds=self._bcrypt_rounds
        )
        user = await self._store.users.create(
            username=payload.username, password_hash=password_hash
        )
        logger.info("auth.signup_success", extra={"user_id": user.id})
        return user

    async def login(self, payload: LoginRequest) -> UserRecord:
        """Return the user whose credentials match.

        Raises:
            AuthenticationAppError: 401 for unknown user or wrong password.
        """
        user = await self._store.users.find_by_username(payload.username)
        if user is not None and await run_in_threadpool(
            verify_password, payload.password, user.password_hash
        ):
            logger.info("auth.login_success", extra={"user_id": user.id})
            return user

        logger.warning(
            "auth.login_failed",
            extra={"username_hash": hash_for_log(payload.username)},
        )
        raise AuthenticationAppError(code="invalid_credentials", message=_INVALID_CREDENTIALS)

    async def current_user(self, user_id: str | None) -> UserRecord | None:
        if user_id is None:
            return None
        return await self._store.users.find_by_id(user_id)
