"""Supabase (PostgREST) credential store adapter.

Every query is bounded by ``timeout_seconds`` via asyncio.wait_for. Driver
errors never escape this module: they are logged and re-raised as
StoreAppError carrying a generic, operation-specific message. The original
error text is only logged outside production.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from supabase import AsyncClient, create_async_client

from app.adapters.store.base import (
    AbstractApiKeyRepository,
    AbstractCredentialStore,
    AbstractUserRepository,
    ApiKeyRecord,
    UserRecord,
)
from app.core.config import settings
from app.core.errors import StoreAppError

logger = logging.getLogger(__name__)

USERS_TABLE = "app_users"
API_KEYS_TABLE = "api_keys"

_API_KEY_COLUMNS = "id, user_id, name, description, key, is_active, created_at, last_used"
_USER_COLUMNS = "id, username, password_hash, created_at"


def _to_user(row: dict[str, Any]) -> UserRecord:
    return UserRecord(
        id=str(row["id"]),
        username=row["username"],
        password_hash=row.get("password_hash") or "",
        created_at=str(row.get("created_at") or ""),
    )


def _to_api_key(row: dict[str, Any]) -> ApiKeyRecord:
    return ApiKeyRecord(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        name=row["name"],
        description=row.get("description"),
        key=row["key"],
        is_active=bool(row.get("is_active", True)),
        created_at=str(row.get("created_at") or ""),
        last_used=row.get("last_used"),
    )


class SupabaseStore(AbstractCredentialStore):
    """Owns the async Supabase client and the repositories built on it.

    The client is created lazily on first use, so constructing the store
    (e.g. at import time in the app factory) performs no network I/O.
    """

    def __init__(self, *, url: str, key: str, timeout_seconds: float = 10.0) -> None:
        self._url = url
        self._key = key
        self._timeout_seconds = timeout_seconds
        self._client: AsyncClient | None = None
        self._client_lock = asyncio.Lock()
        self.users = SupabaseUserRepository(self)
        self.api_keys = SupabaseApiKeyRepository(self)

    async def client(self) -> AsyncClient:
        if self._client is not None:
            return self._client
        async with self._client_lock:
            if self._client is None:
                try:
                    self._client = await asyncio.wait_for(
                        create_async_client(self._url, self._key),
                        timeout=self._timeout_seconds,
                    )
                except Exception as exc:
                    self._log_failure("connect", exc)
                    raise StoreAppError(
                        code="store_unavailable",
                        message="The credential store is unavailable.",
                    ) from exc
                logger.info("store.connected", extra={"backend": "supabase"})
        return self._client

    async def table(self, name: str) -> Any:
        return (await self.client()).table(name)

    async def execute(self, query: Any, *, operation: str, message: str) -> Any:
        """Run a prepared PostgREST query with the configured timeout.

        Args:
            query: Query builder returned by ``table(...)`` chaining.
            operation: Short operation name for logs (e.g. "api_keys.list").
            message: Client-safe message used if the call fails.

        Raises:
            StoreAppError: On timeout or any driver error.
        """
        try:
            return await asyncio.wait_for(query.execute(), timeout=self._timeout_seconds)
        except asyncio.TimeoutError as exc:
            logger.error(
                "store.timeout",
                extra={"operation": operation, "timeout_s": self._timeout_seconds},
            )
            raise StoreAppError(code="store_timeout", message=message) from exc
        except Exception as exc:
            self._log_failure(operation, exc)
            raise StoreAppError(code="store_error", message=message) from exc

    def _log_failure(self, operation: str, exc: Exception) -> None:
        extra: dict[str, Any] = {
            "operation": operation,
            "error_type": type(exc).__name__,
        }
        if not settings.is_production:
            extra["error_msg"] = str(exc)
        logger.error("store.query_failed", extra=extra)

    async def close(self) -> None:
        self._client = None


class SupabaseUserRepository(AbstractUserRepository):
    def __init__(self, store: SupabaseStore) -> None:
        self._store = store

    async def _find_one(self, column: str, value: str, operation: str) -> UserRecord | None:
        query = (await self._store.table(USERS_TABLE)).select(_USER_COLUMNS).eq(column, value).limit(1)
        response = await self._store.execute(
            query, operation=operation, message="Error fetching user."
        )
        return _to_user(response.data[0]) if response.data else None

    async def find_by_username(self, username: str) -> UserRecord | None:
        return await self._find_one("username", username, "users.find_by_username")

    async def find_by_id(self, user_id: str) -> UserRecord | None:
        return await self._find_one("id", user_id, "users.find_by_id")

    async def create(self, *, username: str, password_hash: str) -> UserRecord:
        query = (await self._store.table(USERS_TABLE)).insert(
            {"username": username, "password_hash": password_hash}
        )
        response = await self._store.execute(
            query, operation="users.create", message="Error creating user."
        )
        if not response.data:
            raise StoreAppError(code="store_error", message="Error creating user.")
        return _to_user(response.data[0])


class SupabaseApiKeyRepository(AbstractApiKeyRepository):
    def __init__(self, store: SupabaseStore) -> None:
        self._store = store

    async def list_for_user(self, user_id: str) -> list[ApiKeyRecord]:
        query = (
            (await self._store.table(API_KEYS_TABLE))
            .select(_API_KEY_COLUMNS)
            .eq("user_id", user_id)
            .order("created_at", desc=True)
        )
        response = await self._store.execute(
            query, operation="api_keys.list", message="Failed to fetch API keys."
        )
        return [_to_api_key(row) for row in response.data or []]

    async def count_for_user(self, user_id: str) -> int:
        query = (
            (await self._store.table(API_KEYS_TABLE))
            .select("id", count="exact", head=True)
            .eq("user_id", user_id)
        )
        response = await self._store.execute(
            query, operation="api_keys.count", message="Failed to check API key limit."
        )
        return response.count or 0

    async def find_by_id(self, key_id: str) -> ApiKeyRecord | None:
        query = (
            (await self._store.table(API_KEYS_TABLE))
            .select(_API_KEY_COLUMNS)
            .eq("id", key_id)
            .limit(1)
        )
        response = await self._store.execute(
            query, operation="api_keys.find_by_id", message="Failed to fetch API key."
        )
        return _to_api_key(response.data[0]) if response.data else None

    async def find_active_by_key(self, key: str) -> ApiKeyRecord | None:
        query = (
            (await self._store.table(API_KEYS_TABLE))
            .select(_API_KEY_COLUMNS)
            .eq("key", key)
            .eq("is_active", True)
            .limit(1)
        )
        response = await self._store.execute(
            query, operation="api_keys.find_active_by_key", message="Error validating API key."
        )
        return _to_api_key(response.data[0]) if response.data else None

    async def create(
        self,
        *,
        user_id: str,
        name: str,
        key: str,
        description: str | None = None,
        is_active: bool = True,
    ) -> ApiKeyRecord:
        query = (await self._store.table(API_KEYS_TABLE)).insert(
            {
                "user_id": user_id,
                "name": name,
                "description": description,
                "key": key,
                "is_active": is_active,
            }
        )
        response = await self._store.execute(
            query, operation="api_keys.create", message="Failed to create API key."
        )
        if not response.data:
            raise StoreAppError(code="store_error", message="Failed to create API key.")
        return _to_api_key(response.data[0])

    async def update(
        self,
        key_id: str,
        user_id: str,
        changes: dict[str, Any],
    ) -> ApiKeyRecord | None:
        query = (
            (await self._store.table(API_KEYS_TABLE))
            .update(changes)
            .eq("id", key_id)
            .eq("user_id", user_id)
        )
        response = await self._store.execute(
            query, operation="api_keys.update", message="Failed to update API key."
        )
        return _to_api_key(response.data[0]) if response.data else None

    async def delete(self, key_id: str, user_id: str) -> bool:
        query = (
            (await self._store.table(API_KEYS_TABLE))
            .delete()
            .eq("id", key_id)
            .eq("user_id", user_id)
        )
        response = await self._store.execute(
            query, operation="api_keys.delete", message="Failed to delete API key."
        )
        return bool(response.data)
