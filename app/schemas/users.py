"""Pydantic schemas for signup, login and the current-user endpoint."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator, model_validator
from pydantic_core import PydanticCustomError

from app.adapters.store.base import UserRecord
from app.utils.validators import (
    PASSWORD_MAX_LENGTH,
    PASSWORD_MIN_LENGTH,
    USERNAME_MAX_LENGTH,
    USERNAME_MIN_LENGTH,
    is_valid_password,
    is_valid_username,
    sanitize_string,
)


class LoginRequest(BaseModel):
    """Credentials posted to /auth/login.

    The username is trimmed and truncated before lookup; both fields must be
    non-empty.
    """

    model_config = ConfigDict(extra="ignore")

    username: str = ""
    password: StrictStr = ""

    @field_validator("username", mode="before")
    @classmethod
    def _sanitize_username(cls, value: Any) -> str:
        if value is None:
            return ""
        if not isinstance(value, str):
            raise PydanticCustomError("string_type", "Username must be a string.")
        return sanitize_string(value, USERNAME_MAX_LENGTH)

    @field_validator("password", mode="before")
    @classmethod
    def _default_password(cls, value: Any) -> Any:
        return "" if value is None else value

    @model_validator(mode="after")
    def _require_credentials(self) -> "LoginRequest":
        if not self.username or not self.password:
            raise PydanticCustomError(
                "missing_credentials", "Username and password are required."
            )
        return self


class SignupRequest(LoginRequest):
    """Credentials posted to /users; adds format rules on top of LoginRequest."""

    @model_validator(mode="after")
    def _check_formats(self) -> "SignupRequest":
        if not self.username or not self.password:
            return self  # reported by _require_credentials
        if not is_valid_username(self.username):
            raise PydanticCustomError(
                "invalid_username",
                "Username must be {min}-{max} characters and contain only letters, "
                "numbers, and @._-",
                {"min": USERNAME_MIN_LENGTH, "max": USERNAME_MAX_LENGTH},
            )
        if not is_valid_password(self.password):
            raise PydanticCustomError(
                "invalid_password",
                "Password must be between {min} and {max} characters.",
                {"min": PASSWORD_MIN_LENGTH, "max": PASSWORD_MAX_LENGTH},
            )
        return self


class UserSummary(BaseModel):
    id: str
    username: str

    @classmethod
    def from_record(cls, record: UserRecord) -> "UserSummary":
        return cls(id=record.id, username=record.username)


class UserProfile(UserSummary):
    created_at: str | None = None

    @classmethod
    def from_record(cls, record: UserRecord) -> "UserProfile":
        return cls(id=record.id, username=record.username, created_at=record.created_at)


class LoginResponse(BaseModel):
    user: UserSummary


class SignupResponse(BaseModel):
    user: UserProfile


class CurrentUserResponse(BaseModel):
    user: UserProfile | None = Field(
        default=None,
        description="The signed-in user, or null when there is no valid session.",
    )


class SuccessResponse(BaseModel):
    success: bool = True
