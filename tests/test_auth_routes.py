"""
HTTP-level tests for the /auth routes.
"""

import uuid
from unittest.mock import AsyncMock

import pytest

from auth import service
from auth.errors import PersistenceError
from auth.tokens import verify_token
from config.settings import config


async def _register(client, email="a@b.com", password="secret1", **names):
    return await client.post("/auth/users", json={"email": email, "password": password, **names})


class TestCreateUser:
    @pytest.mark.asyncio
    async def test_created(self, http_client):
        resp = await _register(http_client, firstName="Anna", lastName="Bos")

        assert resp.status_code == 201
        body = resp.json()
        assert body["email"] == "a@b.com"
        assert body["firstName"] == "Anna"
        assert body["lastName"] == "Bos"
        assert body["message"] == "Registration successful"
        assert "password" not in body and "passwordHash" not in body
        assert resp.headers["location"].endswith(f"/auth/users/{body['id']}")
        assert "x-process-time" in resp.headers

    @pytest.mark.asyncio
    async def test_short_password(self, http_client):
        resp = await _register(http_client, password="123")
        assert resp.status_code == 400
        assert resp.json() == {"message": "Password must be at least 6 characters"}

    @pytest.mark.asyncio
    async def test_password_longer_than_72_bytes(self, http_client, count_users):
        resp = await _register(http_client, password="a" * 73)
        assert resp.status_code == 400
        assert resp.json() == {"message": "Password must be at most 72 bytes"}
        assert await count_users() == 0

    @pytest.mark.asyncio
    async def test_missing_fields(self, http_client):
        resp = await http_client.post("/auth/users", json={})
        assert resp.status_code == 400
        assert resp.json() == {"message": "Email is required"}

    @pytest.mark.asyncio
    async def test_malformed_body(self, http_client):
        resp = await http_client.post(
            "/auth/users", content="not json", headers={"Content-Type": "application/json"}
        )
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_duplicate(self, http_client):
        await _register(http_client)
        resp = await _register(http_client)
        assert resp.status_code == 409
        assert resp.json() == {"message": "User with this email already exists"}

    @pytest.mark.asyncio
    async def test_storage_failure_hides_detail(self, http_client, monkeypatch):
        monkeypatch.setattr(service, "insert_user", AsyncMock(side_effect=PersistenceError()))
        resp = await _register(http_client)
        assert resp.status_code == 500
        assert resp.json() == {"message": "Error creating user account"}


class TestCreateSession:
    @pytest.mark.asyncio
    async def test_login_returns_profile_and_token(self, http_client):
        created = (await _register(http_client, firstName="Anna")).json()

        resp = await http_client.post(
            "/auth/sessions", json={"email": "a@b.com", "password": "secret1"}
        )

        assert resp.status_code == 200
        body = resp.json()
        assert body["id"] == created["id"]
        assert body["message"] == "Login successful"
        assert verify_token(body["token"]) == created["id"]

    @pytest.mark.asyncio
    async def test_token_omitted_when_issuance_disabled(self, http_client, monkeypatch):
        monkeypatch.setattr(config, "token_issuance_enabled", False)
        await _register(http_client)
        resp = await http_client.post(
            "/auth/sessions", json={"email": "a@b.com", "password": "secret1"}
        )
        assert resp.status_code == 200
        assert "token" not in resp.json()

    @pytest.mark.asyncio
    async def test_unknown_email_and_wrong_password_look_the_same(self, http_client):
        await _register(http_client)

        unknown = await http_client.post(
            "/auth/sessions", json={"email": "nobody@b.com", "password": "secret1"}
        )
        wrong = await http_client.post(
            "/auth/sessions", json={"email": "a@b.com", "password": "nope-nope"}
        )

        assert unknown.status_code == wrong.status_code == 401
        assert unknown.json() == wrong.json() == {"message": "Invalid email or password"}

    @pytest.mark.asyncio
    async def test_missing_password(self, http_client):
        resp = await http_client.post("/auth/sessions", json={"email": "a@b.com"})
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_overlong_password_is_plain_rejection(self, http_client):
        await _register(http_client)
        resp = await http_client.post(
            "/auth/sessions", json={"email": "a@b.com", "password": "x" * 100}
        )
        assert resp.status_code == 401
        assert resp.json() == {"message": "Invalid email or password"}


class TestDeleteSession:
    @pytest.mark.asyncio
    async def test_without_body(self, http_client):
        resp = await http_client.request("DELETE", "/auth/sessions")
        assert resp.status_code == 204

    @pytest.mark.asyncio
    async def test_with_user_hint_twice(self, http_client):
        for _ in range(2):
            resp = await http_client.request(
                "DELETE", "/auth/sessions", json={"userId": str(uuid.uuid4())}
            )
            assert resp.status_code == 204
            assert resp.content == b""


class TestReadUser:
    @pytest.mark.asyncio
    async def test_found(self, http_client):
        created = (await _register(http_client)).json()
        resp = await http_client.get(f"/auth/users/{created['id']}")
        assert resp.status_code == 200
        assert resp.json()["message"] == "User verified"

    @pytest.mark.asyncio
    async def test_malformed_id(self, http_client):
        resp = await http_client.get("/auth/users/not-a-uuid")
        assert resp.status_code == 400
        assert resp.json() == {"message": "Invalid user ID format"}

    @pytest.mark.asyncio
    async def test_unknown_id(self, http_client):
        resp = await http_client.get(f"/auth/users/{uuid.uuid4()}")
        assert resp.status_code == 404


class TestCurrentSession:
    @pytest.mark.asyncio
    async def test_bearer_token_resolves_to_profile(self, http_client):
        await _register(http_client)
        login = (
            await http_client.post(
                "/auth/sessions", json={"email": "a@b.com", "password": "secret1"}
            )
        ).json()

        resp = await http_client.get(
            "/auth/sessions/current", headers={"Authorization": f"Bearer {login['token']}"}
        )
        assert resp.status_code == 200
        assert resp.json()["id"] == login["id"]

    @pytest.mark.asyncio
    async def test_missing_token(self, http_client):
        resp = await http_client.get("/auth/sessions/current")
        assert resp.status_code == 401
