"""JSON body admission: content negotiation, parsing and schema validation.

Malformed input always surfaces as ValidationAppError (HTTP 400), never as a
500 or FastAPI's default 422.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable, TypeVar

from fastapi import Depends, Request
from pydantic import BaseModel, ValidationError

from app.core.errors import ValidationAppError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

JSON_CONTENT_TYPE = "application/json"


def is_json_content_type(content_type: str | None) -> bool:
    return bool(content_type) and JSON_CONTENT_TYPE in content_type.lower()


async def read_json_body(request: Request) -> dict[str, Any]:
    """Read the request body as a JSON object.

    Raises:
        ValidationAppError: If the Content-Type is not JSON, the body does not
            parse, or the top-level value is not an object.
    """
    if not is_json_content_type(request.headers.get("content-type")):
        raise ValidationAppError(
            code="unsupported_content_type",
            message="Content-Type must be application/json.",
        )

    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.info("request_body.unparsable", extra={"path": request.url.path})
        raise ValidationAppError(code="invalid_body", message="Invalid request body.")

    if not isinstance(body, dict):
        raise ValidationAppError(code="invalid_body", message="Invalid request body.")

    return body


def parse_payload(model: type[ModelT], body: dict[str, Any]) -> ModelT:
    """Validate a decoded body against ``model``.

    The first validation error becomes the client-facing message; custom
    errors raised by schema validators already carry a readable sentence.
    """
    try:
        return model.model_validate(body)
    except ValidationError as exc:
        error = exc.errors(include_url=False)[0]
        field = ".".join(str(part) for part in error.get("loc", ()))
        message = error["msg"]
        if field and error["type"] in {"missing", "string_type", "bool_type", "datetime_parsing", "datetime_type"}:
            message = f"Invalid value for '{field}': {message}"
        details = {"field": field} if field else None
        raise ValidationAppError(code=error["type"], message=message, details=details) from exc


def json_payload(model: type[ModelT]) -> Callable[..., Awaitable[ModelT]]:
    """Build a FastAPI dependency yielding a validated ``model`` instance.

    Usage:
        payload: Annotated[LoginRequest, Depends(json_payload(LoginRequest))]
    """

    async def dependency(body: dict[str, Any] = Depends(read_json_body)) -> ModelT:
        return parse_payload(model, body)

    return dependency
