"""Credential store interfaces.

Services depend only on these narrow repositories, never on a specific
storage engine. Every ApiKey mutation is filtered by both the key id and the
owning user id.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class UserRecord:
    id: str
    username: str
    password_hash: str
    created_at: str


@dataclass(frozen=True)
class ApiKeyRecord:
    id: str
    user_id: str
    name: str
    key: str
    is_active: bool
    created_at: str
    description: str | None = None
    last_used: str | None = None


class AbstractUserRepository(ABC):
    """Read/write access to the ``app_users`` collection."""

    @abstractmethod
    async def find_by_username(self, username: str) -> UserRecord | None:
        raise NotImplementedError

    @abstractmethod
    async def find_by_id(self, user_id: str) -> UserRecord | None:
        raise NotImplementedError

    @abstractmethod
    async def create(self, *, username: str, password_hash: str) -> UserRecord:
        """Insert a user and return the stored row.

        Raises:
            ConflictAppError: If the username is already taken (backends that
                can detect it).
            StoreAppError: On any store failure.
        """
        raise NotImplementedError


class AbstractApiKeyRepository(ABC):
    """Read/write access to the ``api_keys`` collection."""

    @abstractmethod
    async def list_for_user(self, user_id: str) -> list[ApiKeyRecord]:
        """Return the user's keys, newest first."""
        raise NotImplementedError

    @abstractmethod
    async def count_for_user(self, user_id: str) -> int:
        raise NotImplementedError

    @abstractmethod
    async def find_by_id(self, key_id: str) -> ApiKeyRecord | None:
        """Single-row lookup used for existence and ownership checks."""
        raise NotImplementedError

    @abstractmethod
    async def find_active_by_key(self, key: str) -> ApiKeyRecord | None:
        raise NotImplementedError

    @abstractmethod
    async def create(
        self,
        *,
        user_id: str,
        name: str,
        key: str,
        description: str | None = None,
        is_active: bool = True,
    ) -> ApiKeyRecord:
        raise NotImplementedError

    @abstractmethod
    async def update(
        self,
        key_id: str,
        user_id: str,
        changes: dict[str, Any],
    ) -> ApiKeyRecord | None:
        """Apply column changes to a key owned by ``user_id``.

        Args:
            key_id: Target key id.
            user_id: Owning user id; rows owned by anyone else are untouched.
            changes: Column name to new value (name, description, key,
                is_active, last_used).

        Returns:
            The updated row, or None if no row matched both ids.
        """
        raise NotImplementedError

    @abstractmethod
    async def delete(self, key_id: str, user_id: str) -> bool:
        """Delete a key owned by ``user_id``; return whether a row was removed."""
        raise NotImplementedError


class AbstractCredentialStore(ABC):
    """Bundle of repositories sharing one backend connection."""

    users: AbstractUserRepository
    api_keys: AbstractApiKeyRepository

    async def close(self) -> None:  # pragma: no cover - default no-op
        return None
