"""Credential store adapter layer - abstracts over the users/api_keys backend."""

from app.adapters.store.base import (
    AbstractApiKeyRepository,
    AbstractCredentialStore,
    AbstractUserRepository,
    ApiKeyRecord,
    UserRecord,
)
from app.adapters.store.factory import create_store
from app.adapters.store.in_memory import InMemoryStore

__all__ = [
    "AbstractApiKeyRepository",
    "AbstractCredentialStore",
    "AbstractUserRepository",
    "ApiKeyRecord",
    "InMemoryStore",
    "UserRecord",
    "create_store",
]
