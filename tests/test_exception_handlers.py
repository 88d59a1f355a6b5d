"""Tests for global exception handlers.

Validates that all exception types are handled consistently with
proper HTTP status codes, error format, and no information leakage.
"""

import asyncio
import json
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.errors import (
    AppError,
    AuthenticationAppError,
    AuthorizationAppError,
    ConflictAppError,
    NotFoundAppError,
    RateLimitAppError,
    StoreAppError,
    ValidationAppError,
)
from app.core.exception_handlers import (
    general_exception_handler,
    setup_exception_handlers,
)


@pytest.fixture
def app_with_handlers() -> FastAPI:
    """Create FastAPI app with exception handlers registered."""
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def client(app_with_handlers: FastAPI) -> TestClient:
    """Create test client with handlers enabled."""
    return TestClient(app_with_handlers, raise_server_exceptions=False)


def _decode(response) -> dict:
    body = response.body if isinstance(response.body, bytes) else bytes(response.body)
    return json.loads(body.decode())


class TestAppErrorHandler:
    """Test handler for AppError and subclasses."""

    @pytest.mark.parametrize(
        ("error_cls", "status_code"),
        [
            (ValidationAppError, 400),
            (AuthenticationAppError, 401),
            (AuthorizationAppError, 403),
            (NotFoundAppError, 404),
            (ConflictAppError, 409),
            (StoreAppError, 500),
        ],
    )
    def test_status_code_follows_error_class(
        self, client: TestClient, app_with_handlers: FastAPI, error_cls, status_code: int
    ):
        @app_with_handlers.get("/boom")
        async def boom():
            raise error_cls(code="some_code", message="Some message.")

        response = client.get("/boom")

        assert response.status_code == status_code
        data = response.json()
        assert data["error"]["code"] == "some_code"
        assert data["error"]["message"] == "Some message."
        assert "request_id" in data["error"]

    def test_client_error_includes_details(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/details")
        async def details():
            raise ValidationAppError(
                code="name_too_long",
                message="Name must be 200 characters or less.",
                details={"field": "name", "max_length": 200},
            )

        data = client.get("/details").json()

        assert data["error"]["details"] == {"field": "name", "max_length": 200}

    def test_server_error_hides_details(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/store")
        async def store():
            raise StoreAppError(
                code="store_error",
                message="Failed to fetch API keys.",
                details={"context": {"sql": "select * from api_keys"}},
            )

        data = client.get("/store").json()

        assert data["error"]["message"] == "Failed to fetch API keys."
        assert "details" not in data["error"]

    def test_rate_limit_error_sets_headers(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/limited")
        async def limited():
            raise RateLimitAppError(
                code="rate_limited",
                message="Too many requests. Please try again later.",
                headers={"Retry-After": "60", "X-RateLimit-Remaining": "0"},
            )

        response = client.get("/limited")

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "60"
        assert response.headers["X-RateLimit-Remaining"] == "0"


class TestFrameworkErrors:
    def test_unknown_route_uses_uniform_body(self, client: TestClient):
        response = client.get("/does-not-exist")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "not_found"

    def test_request_validation_is_400(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/typed")
        async def typed(limit: int):
            return {"limit": limit}

        response = client.get("/typed", params={"limit": "many"})

        assert response.status_code == 400
        data = response.json()
        assert data["error"]["code"] == "invalid_request"
        assert data["error"]["details"]["field"] == "query.limit"


class TestGeneralExceptionHandler:
    """Test fallback handler for unexpected exceptions."""

    def test_unexpected_exception_returns_generic_500(
        self, client: TestClient, app_with_handlers: FastAPI
    ):
        @app_with_handlers.get("/crash")
        async def crash():
            raise RuntimeError("database password is hunter2")

        response = client.get("/crash")

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "internal_server_error"
        assert "hunter2" not in response.text

    def test_general_exception_handler_never_leaks_stack_trace(self):
        request = AsyncMock()
        request.url.path = "/test"
        request.method = "GET"

        response = asyncio.run(general_exception_handler(request, ValueError("Test error")))

        response_text = json.dumps(_decode(response))
        assert response.status_code == 500
        assert "Traceback" not in response_text
        assert "ValueError" not in response_text
        assert "Test error" not in response_text

    @pytest.mark.parametrize(("is_production", "logged"), [(False, True), (True, False)])
    def test_error_detail_logged_only_outside_production(self, is_production: bool, logged: bool):
        request = AsyncMock()
        request.url.path = "/test"
        request.method = "GET"

        with patch("app.core.exception_handlers.settings") as mock_settings, patch(
            "app.core.exception_handlers.logger"
        ) as mock_logger:
            mock_settings.is_production = is_production
            asyncio.run(general_exception_handler(request, RuntimeError("secret detail")))

        extra = mock_logger.error.call_args.kwargs["extra"]
        assert ("error_msg" in extra) is logged
        assert extra["error_type"] == "RuntimeError"


def test_setup_exception_handlers_registers_handlers(app_with_handlers: FastAPI):
    assert AppError in app_with_handlers.exception_handlers
    assert Exception in app_with_handlers.exception_handlers
