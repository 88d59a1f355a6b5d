"""Tests for the API key management routes."""

import pytest
from fastapi.testclient import TestClient

from app.core.session import USER_SESSION_COOKIE

VALID_KEY = "api_" + "x" * 20
MISSING_ID = "123e4567-e89b-12d3-a456-426614174000"


def _create(client: TestClient, name: str = "k1", **extra) -> dict:
    response = client.post("/api-keys", json={"name": name, "key": VALID_KEY, **extra})
    assert response.status_code == 201, response.text
    return response.json()


class TestAuthentication:
    @pytest.mark.parametrize(
        ("method", "path"),
        [
            ("get", "/api-keys"),
            ("delete", f"/api-keys/{MISSING_ID}"),
        ],
    )
    def test_requires_session(self, client: TestClient, method: str, path: str) -> None:
        response = getattr(client, method)(path)

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Unauthorized"

    def test_create_requires_session(self, client: TestClient) -> None:
        response = client.post("/api-keys", json={"name": "k1", "key": VALID_KEY})

        assert response.status_code == 401

    def test_malformed_session_cookie(self, client: TestClient) -> None:
        client.cookies.set(USER_SESSION_COOKIE, "not-a-uuid")

        response = client.get("/api-keys")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "invalid_session"


class TestCreate:
    def test_creates_active_key(self, client: TestClient, signup) -> None:
        signup()

        created = _create(client, description="  for testing  ")

        assert created["name"] == "k1"
        assert created["key"] == VALID_KEY
        assert created["isActive"] is True
        assert created["description"] == "for testing"
        assert created["createdAt"]
        assert "lastUsed" not in created

    def test_inactive_on_request(self, client: TestClient, signup) -> None:
        signup()

        assert _create(client, isActive=False)["isActive"] is False

    @pytest.mark.parametrize(
        ("body", "message"),
        [
            ({"key": VALID_KEY}, "Name and key are required."),
            ({"name": "   ", "key": VALID_KEY}, "Name and key are required."),
            ({"name": "k1"}, "Name and key are required."),
            ({"name": "k1", "key": "sk_" + "x" * 20}, "Invalid API key format."),
            ({"name": "k1", "key": "api_short"}, "Invalid API key format."),
            ({"name": "n" * 201, "key": VALID_KEY}, "Name must be 200 characters or less."),
            (
                {"name": "k1", "key": VALID_KEY, "description": "d" * 1001},
                "Description must be 1000 characters or less.",
            ),
        ],
    )
    def test_rejects_invalid_fields(
        self, client: TestClient, signup, body: dict, message: str
    ) -> None:
        signup()

        response = client.post("/api-keys", json=body)

        assert response.status_code == 400
        assert response.json()["error"]["message"] == message

    def test_validation_runs_before_authentication(self, client: TestClient) -> None:
        response = client.post("/api-keys", json={"name": "k1", "key": "bad"})

        assert response.status_code == 400

    def test_key_cap(self, client: TestClient, signup) -> None:
        signup()
        for i in range(10):
            _create(client, name=f"k{i}")

        response = client.post("/api-keys", json={"name": "k10", "key": VALID_KEY})

        assert response.status_code == 403
        assert "maximum limit of 10 API keys" in response.json()["error"]["message"]
        assert len(client.get("/api-keys").json()) == 10

        oldest = client.get("/api-keys").json()[-1]
        assert client.delete(f"/api-keys/{oldest['id']}").status_code == 200
        assert client.post("/api-keys", json={"name": "k10", "key": VALID_KEY}).status_code == 201


class TestList:
    def test_scoped_to_caller_newest_first(self, client: TestClient, signup) -> None:
        signup("alice")
        first = _create(client, name="first")
        second = _create(client, name="second")

        signup("bob")
        _create(client, name="bobs")
        bobs = client.get("/api-keys").json()

        client.cookies.clear()
        client.post("/auth/login", json={"username": "alice", "password": "secret1"})
        alices = client.get("/api-keys").json()

        assert [k["name"] for k in bobs] == ["bobs"]
        assert [k["id"] for k in alices] == [second["id"], first["id"]]


class TestUpdate:
    def test_partial_update(self, client: TestClient, signup) -> None:
        signup()
        created = _create(client, description="keep me")

        response = client.patch(f"/api-keys/{created['id']}", json={"isActive": False})

        assert response.status_code == 200
        body = response.json()
        assert body["isActive"] is False
        assert body["name"] == "k1"
        assert body["description"] == "keep me"

    def test_name_is_trimmed_and_truncated(self, client: TestClient, signup) -> None:
        signup()
        created = _create(client)

        response = client.patch(f"/api-keys/{created['id']}", json={"name": "  " + "n" * 250})

        assert response.status_code == 200
        assert response.json()["name"] == "n" * 200

    def test_empty_description_clears_it(self, client: TestClient, signup) -> None:
        signup()
        created = _create(client, description="old")

        response = client.patch(f"/api-keys/{created['id']}", json={"description": ""})

        assert response.status_code == 200
        assert "description" not in response.json()

    def test_last_used_is_stored_as_sent(self, client: TestClient, signup) -> None:
        signup()
        created = _create(client)

        response = client.patch(
            f"/api-keys/{created['id']}", json={"lastUsed": "2024-05-01T12:00:00Z"}
        )

        assert response.status_code == 200
        assert response.json()["lastUsed"] == "2024-05-01T12:00:00Z"
        assert client.get("/api-keys").json()[0]["lastUsed"] == "2024-05-01T12:00:00Z"

    @pytest.mark.parametrize("value", ["yesterday", 1714564800])
    def test_last_used_must_be_a_timestamp_string(
        self, client: TestClient, signup, value
    ) -> None:
        signup()
        created = _create(client)

        response = client.patch(f"/api-keys/{created['id']}", json={"lastUsed": value})

        assert response.status_code == 400
        assert response.json()["error"]["details"] == {"field": "lastUsed"}

    @pytest.mark.parametrize(
        ("body", "message"),
        [
            ({"name": "   "}, "Name cannot be empty."),
            ({"key": "not-a-key"}, "Invalid API key format."),
        ],
    )
    def test_rejects_invalid_fields(
        self, client: TestClient, signup, body: dict, message: str
    ) -> None:
        signup()
        created = _create(client)

        response = client.patch(f"/api-keys/{created['id']}", json=body)

        assert response.status_code == 400
        assert response.json()["error"]["message"] == message

    def test_empty_body_returns_key_unchanged(self, client: TestClient, signup) -> None:
        signup()
        created = _create(client)

        response = client.patch(f"/api-keys/{created['id']}", json={})

        assert response.status_code == 200
        assert response.json() == created

    def test_invalid_id(self, client: TestClient, signup) -> None:
        signup()

        response = client.patch("/api-keys/not-a-uuid", json={"name": "x"})

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Invalid API key ID."

    def test_missing_key(self, client: TestClient, signup) -> None:
        signup()

        response = client.patch(f"/api-keys/{MISSING_ID}", json={"name": "x"})

        assert response.status_code == 404
        assert response.json()["error"]["message"] == "API key not found."

    def test_other_users_key(self, client: TestClient, signup) -> None:
        signup("alice")
        created = _create(client)
        signup("bob")

        response = client.patch(f"/api-keys/{created['id']}", json={"name": "mine now"})

        assert response.status_code == 403
        assert response.json()["error"]["message"] == "Forbidden."


class TestDelete:
    def test_deletes_own_key(self, client: TestClient, signup) -> None:
        signup()
        created = _create(client)

        response = client.delete(f"/api-keys/{created['id']}")

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert client.get("/api-keys").json() == []

    def test_other_users_key_is_untouched(self, client: TestClient, signup) -> None:
        signup("alice")
        created = _create(client)
        signup("bob")

        response = client.delete(f"/api-keys/{created['id']}")

        assert response.status_code == 403

        client.cookies.clear()
        client.post("/auth/login", json={"username": "alice", "password": "secret1"})
        assert [k["id"] for k in client.get("/api-keys").json()] == [created["id"]]

    def test_missing_and_invalid_ids(self, client: TestClient, signup) -> None:
        signup()

        assert client.delete(f"/api-keys/{MISSING_ID}").status_code == 404
        assert client.delete("/api-keys/12345").status_code == 400
