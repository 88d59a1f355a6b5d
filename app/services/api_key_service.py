"""API key management: per-user CRUD with ownership checks, plus validation.

Ownership is decided by a single-row lookup before any mutation, so a missing
key (404) and someone else's key (403) are distinguishable. The mutation is
then filtered by both the key id and the owner id, so a row that changed
hands between the check and the write is never touched.

The per-user cap is enforced as count-then-insert without a transaction:
two concurrent creates at ``max_keys - 1`` can both succeed.
"""

from __future__ import annotations

import logging

from app.adapters.store.base import AbstractCredentialStore, ApiKeyRecord
from app.core.errors import (
    AuthenticationAppError,
    AuthorizationAppError,
    NotFoundAppError,
)
from app.core.logging import hash_for_log
from app.schemas.api_keys import (
    ApiKeyCreateRequest,
    ApiKeyUpdateRequest,
    ValidateKeyRequest,
)

logger = logging.getLogger(__name__)


class ApiKeyService:
    def __init__(self, store: AbstractCredentialStore, *, max_keys: int = 10) -> None:
        self._keys = store.api_keys
        self._max_keys = max_keys

    async def list_keys(self, user_id: str) -> list[ApiKeyRecord]:
        return await self._keys.list_for_user(user_id)

    async def create_key(self, user_id: str, payload: ApiKeyCreateRequest) -> ApiKeyRecord:
        """Create a key for ``user_id`` unless the user is at the cap.

        Raises:
            AuthorizationAppError: 403 when the user already owns ``max_keys`` keys.
        """
        count = await self._keys.count_for_user(user_id)
        if count >= self._max_keys:
            logger.info(
                "api_key.limit_reached",
                extra={"user_id": user_id, "count": count, "limit": self._max_keys},
            )
            raise AuthorizationAppError(
                code="api_key_limit_reached",
                message=(
                    f"You have reached the maximum limit of {self._max_keys} API keys. "
                    "Please delete an existing key before creating a new one."
                ),
                details={"limit": self._max_keys},
            )

        record = await self._keys.create(
            user_id=user_id,
            name=payload.name or "",
            description=payload.description,
            key=payload.key or "",
            is_active=payload.is_active,
        )
        logger.info("api_key.created", extra={"user_id": user_id, "api_key_id": record.id})
        return record

    async def _require_owned(self, user_id: str, key_id: str) -> ApiKeyRecord:
        existing = await self._keys.find_by_id(key_id)
        if existing is None:
            raise NotFoundAppError(code="api_key_not_found", message="API key not found.")
        if existing.user_id != user_id:
            logger.warning(
                "api_key.ownership_denied",
                extra={"user_id": user_id, "api_key_id": key_id},
            )
            raise AuthorizationAppError(code="forbidden", message="Forbidden.")
        return existing

    async def update_key(
        self, user_id: str, key_id: str, payload: ApiKeyUpdateRequest
    ) -> ApiKeyRecord:
        """Apply the fields present in ``payload`` to a key the user owns.

        Raises:
            NotFoundAppError: 404 if the key does not exist (or vanished
                before the write).
            AuthorizationAppError: 403 if another user owns it.
        """
        existing = await self._require_owned(user_id, key_id)

        changes = payload.changes()
        if not changes:
            return existing

        updated = await self._keys.update(key_id, user_id, changes)
        if updated is None:
            raise NotFoundAppError(code="api_key_not_found", message="API key not found.")

        logger.info(
            "api_key.updated",
            extra={"user_id": user_id, "api_key_id": key_id, "fields": sorted(changes)},
        )
        return updated

    async def delete_key(self, user_id: str, key_id: str) -> None:
        await self._require_owned(user_id, key_id)

        if not await self._keys.delete(key_id, user_id):
            raise NotFoundAppError(code="api_key_not_found", message="API key not found.")

        logger.info("api_key.deleted", extra={"user_id": user_id, "api_key_id": key_id})

    async def validate_key(self, payload: ValidateKeyRequest) -> ApiKeyRecord:
        """Match a presented key against active keys.

        Raises:
            AuthenticationAppError: 401 when no active key matches.
        """
        record = await self._keys.find_active_by_key(payload.key)
        if record is None:
            logger.warning(
                "api_key.validation_failed",
                extra={"key_hash": hash_for_log(payload.key)},
            )
            raise AuthenticationAppError(
                code="invalid_api_key",
                message="Invalid or inactive API key.",
            )

        logger.info("api_key.validated", extra={"api_key_id": record.id})
        return record
