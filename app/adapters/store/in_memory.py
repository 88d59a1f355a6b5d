"""In-memory credential store.

Used by the test-suite and for local development without a database. Rows
live in process memory only; the lock makes each method atomic with respect
to other threads.
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from app.adapters.store.base import (
    AbstractApiKeyRepository,
    AbstractCredentialStore,
    AbstractUserRepository,
    ApiKeyRecord,
    UserRecord,
)
from app.core.errors import ConflictAppError

_UPDATABLE_COLUMNS = frozenset({"name", "description", "key", "is_active", "last_used"})


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class InMemoryUserRepository(AbstractUserRepository):
    def __init__(self, lock: threading.RLock) -> None:
        self._lock = lock
        self._rows: dict[str, UserRecord] = {}

    async def find_by_username(self, username: str) -> UserRecord | None:
        with self._lock:
            return next((u for u in self._rows.values() if u.username == username), None)

    async def find_by_id(self, user_id: str) -> UserRecord | None:
        with self._lock:
            return self._rows.get(user_id)

    async def create(self, *, username: str, password_hash: str) -> UserRecord:
        with self._lock:
            if any(u.username == username for u in self._rows.values()):
                raise ConflictAppError(
                    code="username_taken",
                    message="User already exists with this username.",
                )
            user = UserRecord(
                id=str(uuid.uuid4()),
                username=username,
                password_hash=password_hash,
                created_at=_utc_now(),
            )
            self._rows[user.id] = user
            return user


class InMemoryApiKeyRepository(AbstractApiKeyRepository):
    def __init__(self, lock: threading.RLock) -> None:
        self._lock = lock
        # Insertion-ordered; newest rows are appended last.
        self._rows: dict[str, ApiKeyRecord] = {}

    async def list_for_user(self, user_id: str) -> list[ApiKeyRecord]:
        with self._lock:
            owned = [r for r in reversed(list(self._rows.values())) if r.user_id == user_id]
        return sorted(owned, key=lambda r: r.created_at, reverse=True)

    async def count_for_user(self, user_id: str) -> int:
        with self._lock:
            return sum(1 for r in self._rows.values() if r.user_id == user_id)

    async def find_by_id(self, key_id: str) -> ApiKeyRecord | None:
        with self._lock:
            return self._rows.get(key_id)

    async def find_active_by_key(self, key: str) -> ApiKeyRecord | None:
        with self._lock:
            return next(
                (r for r in self._rows.values() if r.key == key and r.is_active),
                None,
            )

    async def create(
        self,
        *,
        user_id: str,
        name: str,
        key: str,
        description: str | None = None,
        is_active: bool = True,
    ) -> ApiKeyRecord:
        record = ApiKeyRecord(
            id=str(uuid.uuid4()),
            user_id=user_id,
            name=name,
            description=description,
            key=key,
            is_active=is_active,
            created_at=_utc_now(),
        )
        with self._lock:
            self._rows[record.id] = record
        return record

    async def update(
        self,
        key_id: str,
        user_id: str,
        changes: dict[str, Any],
    ) -> ApiKeyRecord | None:
        unknown = set(changes) - _UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Unsupported api_keys columns: {sorted(unknown)}")

        with self._lock:
            current = self._rows.get(key_id)
            if current is None or current.user_id != user_id:
                return None
            updated = replace(current, **changes)
            self._rows[key_id] = updated
            return updated

    async def delete(self, key_id: str, user_id: str) -> bool:
        with self._lock:
            current = self._rows.get(key_id)
            if current is None or current.user_id != user_id:
                return False
            del self._rows[key_id]
            return True


class InMemoryStore(AbstractCredentialStore):
    """Process-local store holding both collections behind one lock."""

    def __init__(self) -> None:
        lock = threading.RLock()
        self.users = InMemoryUserRepository(lock)
        self.api_keys = InMemoryApiKeyRepository(lock)
