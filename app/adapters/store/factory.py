"""Factory pattern for creating credential store instances."""

from __future__ import annotations

from urllib.parse import urlparse

from app.adapters.store.base import AbstractCredentialStore
from app.adapters.store.in_memory import InMemoryStore
from app.core.config import StoreSettings, settings
from app.core.errors import ConfigurationAppError


def _is_http_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def create_store(store_settings: StoreSettings | None = None) -> AbstractCredentialStore:
    """Instantiate the credential store selected by configuration.

    Validates backend-specific requirements and routes to the matching adapter.

    Args:
        store_settings: Optional store settings; defaults to global settings.

    Returns:
        AbstractCredentialStore: Configured store instance.

    Raises:
        ConfigurationAppError: If backend-specific requirements are not met.
    """
    cfg = store_settings or settings.store
    backend = cfg.backend.lower()

    if backend == "memory":
        return InMemoryStore()

    if backend == "supabase":
        missing = [
            name
            for name, value in (
                ("STORE_SUPABASE_URL", cfg.supabase_url),
                ("STORE_SUPABASE_KEY", cfg.supabase_key),
            )
            if not value
        ]
        if missing:
            raise ConfigurationAppError(
                code="store_missing_config",
                message=f"Missing required environment variables: {', '.join(missing)}",
            )
        if not _is_http_url(cfg.supabase_url or ""):
            raise ConfigurationAppError(
                code="store_invalid_url",
                message="STORE_SUPABASE_URL must be a valid URL",
            )

        # Imported lazily so the memory backend works without the driver loaded.
        from app.adapters.store.supabase_store import SupabaseStore

        return SupabaseStore(
            url=cfg.supabase_url or "",
            key=cfg.supabase_key or "",
            timeout_seconds=cfg.timeout_seconds,
        )

    raise ConfigurationAppError(
        code="store_unknown_backend",
        message=f"Unknown store backend: '{backend}'. Supported backends: supabase, memory",
    )
