"""
E2E tests for registration, login and the current-user endpoint.
"""

from datetime import timedelta

import pytest
from sqlalchemy import delete, func, select

from roomloop.core.jwt_utils import create_access_token, create_user_token
from roomloop.models.user import User
from tests.fixtures.api import register


async def _user_count(session_factory) -> int:
    async with session_factory() as session:
        return (await session.execute(select(func.count(User.id)))).scalar_one()


@pytest.mark.e2e
class TestRegister:
    async def test_register_returns_user_and_token(self, async_client, sample_user_data):
        response = await async_client.post("/api/auth/register", json=sample_user_data)

        assert response.status_code == 201
        body = response.json()
        assert body["user"]["email"] == sample_user_data["email"]
        assert body["user"]["username"] == sample_user_data["username"]
        assert "password" not in body["user"]
        assert "password_hash" not in body["user"]
        assert body["token"]

    async def test_duplicate_email_conflicts_without_new_row(
        self, async_client, registered_user, sample_user_data, session_factory
    ):
        payload = {**sample_user_data, "username": "someoneelse"}

        response = await async_client.post("/api/auth/register", json=payload)

        assert response.status_code == 409
        assert response.json()["error_code"] == "DUPLICATE_RESOURCE"
        assert await _user_count(session_factory) == 1

    async def test_duplicate_username_conflicts(self, async_client, registered_user, sample_user_data):
        payload = {**sample_user_data, "email": "other@example.com"}

        response = await async_client.post("/api/auth/register", json=payload)

        assert response.status_code == 409

    @pytest.mark.parametrize("missing", ["email", "username", "password"])
    async def test_missing_field_is_bad_request(self, async_client, sample_user_data, missing, session_factory):
        payload = {k: v for k, v in sample_user_data.items() if k != missing}

        response = await async_client.post("/api/auth/register", json=payload)

        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "VALIDATION_ERROR"
        assert missing in body["message"]
        assert "timestamp" in body
        assert await _user_count(session_factory) == 0

    async def test_short_password_rejected(self, async_client, sample_user_data):
        response = await async_client.post("/api/auth/register", json={**sample_user_data, "password": "short"})

        assert response.status_code == 400

    async def test_username_with_markup_rejected(self, async_client, sample_user_data, session_factory):
        response = await async_client.post(
            "/api/auth/register", json={**sample_user_data, "username": "<b>bold</b>"}
        )

        assert response.status_code == 400
        assert response.json()["message"].startswith("username:")
        assert await _user_count(session_factory) == 0


@pytest.mark.e2e
class TestLogin:
    async def test_login_with_email(self, async_client, registered_user, sample_user_data):
        response = await async_client.post(
            "/api/auth/login",
            json={"email": sample_user_data["email"], "password": sample_user_data["password"]},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["user"]["id"] == registered_user["user"]["id"]
        assert body["token"]

    async def test_login_with_username(self, async_client, registered_user, sample_user_data):
        response = await async_client.post(
            "/api/auth/login",
            json={"username": sample_user_data["username"], "password": sample_user_data["password"]},
        )

        assert response.status_code == 200

    async def test_apostrophe_username_stored_as_typed_and_logs_in(self, async_client):
        register_response = await async_client.post(
            "/api/auth/register",
            json={"email": "oneil@example.com", "username": "o'neil", "password": "password123"},
        )
        assert register_response.status_code == 201
        assert register_response.json()["user"]["username"] == "o'neil"

        response = await async_client.post("/api/auth/login", json={"username": "o'neil", "password": "password123"})

        assert response.status_code == 200
        assert response.json()["user"]["username"] == "o'neil"

    async def test_email_takes_precedence_over_username(self, async_client, registered_user, sample_user_data):
        other = await register(async_client, "otheruser")

        response = await async_client.post(
            "/api/auth/login",
            json={
                "email": sample_user_data["email"],
                "username": "otheruser",
                "password": sample_user_data["password"],
            },
        )

        assert response.status_code == 200
        assert response.json()["user"]["id"] == registered_user["user"]["id"]
        assert response.json()["user"]["id"] != other["user"]["id"]

    async def test_wrong_password_unauthorized(self, async_client, registered_user, sample_user_data):
        response = await async_client.post(
            "/api/auth/login",
            json={"email": sample_user_data["email"], "password": "wrong-password"},
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"

    async def test_unknown_user_unauthorized(self, async_client):
        response = await async_client.post(
            "/api/auth/login", json={"email": "nobody@example.com", "password": "password123"}
        )

        assert response.status_code == 401

    async def test_missing_identifier_bad_request(self, async_client):
        response = await async_client.post("/api/auth/login", json={"password": "password123"})

        assert response.status_code == 400


@pytest.mark.e2e
class TestCurrentUser:
    async def test_me_returns_profile(self, async_client, registered_user, auth_headers):
        response = await async_client.get("/api/users/me", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["user"]["username"] == registered_user["user"]["username"]

    async def test_me_without_token_unauthorized(self, async_client):
        response = await async_client.get("/api/users/me")

        assert response.status_code == 401

    async def test_me_with_garbage_token_forbidden(self, async_client):
        response = await async_client.get("/api/users/me", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 403
        assert response.json()["error_code"] == "INVALID_TOKEN"

    async def test_me_with_expired_token_forbidden(self, async_client, registered_user):
        token = create_access_token({"id": registered_user["user"]["id"]}, expires_delta=timedelta(seconds=-5))

        response = await async_client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 403

    async def test_me_for_deleted_user_not_found(self, async_client, registered_user, session_factory):
        user_id = registered_user["user"]["id"]
        async with session_factory() as session:
            user = await session.get(User, user_id)
            token = create_user_token(user)
            await session.execute(delete(User).where(User.id == user_id))
            await session.commit()

        response = await async_client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 404
        assert response.json()["error_code"] == "USER_NOT_FOUND"
