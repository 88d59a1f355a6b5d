"""Pydantic schemas for API key management and validation.

Wire names are camelCase (``isActive``, ``createdAt``, ``lastUsed``); the
store uses snake_case columns.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictStr,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic_core import PydanticCustomError

from app.adapters.store.base import ApiKeyRecord
from app.utils.validators import (
    API_KEY_MAX_LENGTH,
    is_valid_api_key_format,
    sanitize_string,
)

NAME_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000

_INVALID_KEY_FORMAT = ("invalid_key_format", "Invalid API key format.")
_TIMESTAMP = TypeAdapter(datetime)


class ApiKeyCreateRequest(BaseModel):
    """Body of POST /api-keys. Over-long fields are rejected, not truncated."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: StrictStr | None = None
    description: StrictStr | None = None
    key: StrictStr | None = None
    is_active: StrictBool = Field(default=True, alias="isActive")

    @model_validator(mode="after")
    def _check_fields(self) -> "ApiKeyCreateRequest":
        name = (self.name or "").strip()
        if not name or not self.key:
            raise PydanticCustomError("missing_fields", "Name and key are required.")
        if len(name) > NAME_MAX_LENGTH:
            raise PydanticCustomError(
                "name_too_long",
                "Name must be {max} characters or less.",
                {"max": NAME_MAX_LENGTH},
            )
        if self.description and len(self.description) > DESCRIPTION_MAX_LENGTH:
            raise PydanticCustomError(
                "description_too_long",
                "Description must be {max} characters or less.",
                {"max": DESCRIPTION_MAX_LENGTH},
            )
        if not is_valid_api_key_format(self.key):
            raise PydanticCustomError(*_INVALID_KEY_FORMAT)

        self.name = name
        if self.description is not None:
            self.description = self.description.strip() or None
        return self


class ApiKeyUpdateRequest(BaseModel):
    """Body of PATCH /api-keys/{id}; every field is optional.

    Only fields present in the body are applied. Text fields are trimmed and
    truncated rather than rejected; a null or empty description clears it.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str | None = None
    description: str | None = None
    key: str | None = None
    is_active: bool | None = Field(default=None, alias="isActive")
    last_used: str | None = Field(default=None, alias="lastUsed")

    @field_validator("name", mode="before")
    @classmethod
    def _sanitize_name(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise PydanticCustomError("name_empty", "Name cannot be empty.")
        sanitized = sanitize_string(value, NAME_MAX_LENGTH)
        if not sanitized:
            raise PydanticCustomError("name_empty", "Name cannot be empty.")
        return sanitized

    @field_validator("description", mode="before")
    @classmethod
    def _sanitize_description(cls, value: Any) -> str | None:
        if not value:
            return None
        if not isinstance(value, str):
            raise PydanticCustomError("string_type", "Description must be a string.")
        return sanitize_string(value, DESCRIPTION_MAX_LENGTH) or None

    @field_validator("key", mode="before")
    @classmethod
    def _sanitize_key(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise PydanticCustomError(*_INVALID_KEY_FORMAT)
        sanitized = sanitize_string(value, API_KEY_MAX_LENGTH)
        if not is_valid_api_key_format(sanitized):
            raise PydanticCustomError(*_INVALID_KEY_FORMAT)
        return sanitized

    @field_validator("is_active", mode="before")
    @classmethod
    def _coerce_is_active(cls, value: Any) -> bool:
        return bool(value)

    @field_validator("last_used", mode="before")
    @classmethod
    def _check_last_used(cls, value: Any) -> str | None:
        """Accept an ISO 8601 timestamp string or null; the text is kept verbatim."""
        if value is None:
            return None
        if not isinstance(value, str):
            raise PydanticCustomError(
                "datetime_type", "Input should be an ISO 8601 timestamp string"
            )
        try:
            _TIMESTAMP.validate_python(value)
        except ValidationError:
            raise PydanticCustomError(
                "datetime_parsing", "Input should be a valid ISO 8601 timestamp"
            ) from None
        return value

    def changes(self) -> dict[str, Any]:
        """Map the fields present in the body to store column updates."""
        columns = {
            "name": "name",
            "description": "description",
            "key": "key",
            "is_active": "is_active",
            "last_used": "last_used",
        }
        updates: dict[str, Any] = {}
        for field_name in self.model_fields_set:
            updates[columns[field_name]] = getattr(self, field_name)
        return updates


class ValidateKeyRequest(BaseModel):
    """Body of POST /validate-key."""

    model_config = ConfigDict(extra="ignore")

    key: str = ""

    @field_validator("key", mode="before")
    @classmethod
    def _sanitize_key(cls, value: Any) -> str:
        if not value:
            raise PydanticCustomError("missing_key", "API key is required.")
        if not isinstance(value, str):
            raise PydanticCustomError(*_INVALID_KEY_FORMAT)
        sanitized = sanitize_string(value, API_KEY_MAX_LENGTH)
        if not sanitized:
            raise PydanticCustomError("missing_key", "API key is required.")
        if not is_valid_api_key_format(sanitized):
            raise PydanticCustomError(*_INVALID_KEY_FORMAT)
        return sanitized

    @model_validator(mode="before")
    @classmethod
    def _require_key(cls, data: Any) -> Any:
        if isinstance(data, dict) and "key" not in data:
            raise PydanticCustomError("missing_key", "API key is required.")
        return data


class ApiKeyResponse(BaseModel):
    """Public shape of an API key record. Optional fields are omitted when unset."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    description: str | None = None
    key: str
    created_at: str = Field(alias="createdAt")
    last_used: str | None = Field(default=None, alias="lastUsed")
    is_active: bool = Field(alias="isActive")

    @classmethod
    def from_record(cls, record: ApiKeyRecord) -> "ApiKeyResponse":
        return cls(
            id=record.id,
            name=record.name,
            description=record.description,
            key=record.key,
            created_at=record.created_at,
            last_used=record.last_used,
            is_active=record.is_active,
        )
