"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
Environment variables are set before any app import so that settings are
built for the testing environment with the in-memory store.
"""

import os

# CRITICAL: Set these before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("STORE_BACKEND", "memory")
# Lowest bcrypt cost keeps the suite fast; production uses 10.
os.environ.setdefault("APP_BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from typing import Callable, Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.adapters.store import InMemoryStore
from app.core.app_factory import create_app

VALID_KEY = "api_" + "x" * 20


@pytest.fixture
def store() -> InMemoryStore:
    """Fresh in-memory credential store."""
    return InMemoryStore()


@pytest.fixture
def app(store: InMemoryStore) -> FastAPI:
    """App wired to the test store with its own rate limiter table."""
    return create_app(store=store)


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    """Cookie-persisting test client."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def signup(client: TestClient) -> Callable[..., dict]:
    """Register a user through the API; the client keeps the session cookie."""

    def _signup(username: str = "alice@example.com", password: str = "secret1") -> dict:
        response = client.post("/users", json={"username": username, "password": password})
        assert response.status_code == 201, response.text
        return response.json()["user"]

    return _signup
