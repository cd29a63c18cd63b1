"""
Authentication endpoint tests for Videomaker Log
"""
import pytest
from httpx import AsyncClient

from vmlog.auth.security import decode_token


class TestRegistration:

    async def test_registration_returns_token_pair(self, client: AsyncClient, test_user_data):
        response = await client.post("/api/v1/auth/register", json=test_user_data)

        assert response.status_code == 201
        data = response.json()
        assert data["token_type"] == "bearer"
        assert decode_token(data["access_token"])["type"] == "access"
        assert decode_token(data["refresh_token"])["type"] == "refresh"

    async def test_duplicate_email_conflicts(self, client: AsyncClient, test_user_data):
        first = await client.post("/api/v1/auth/register", json=test_user_data)
        assert first.status_code == 201

        second = await client.post("/api/v1/auth/register", json=test_user_data)
        assert second.status_code == 409
        assert "already exists" in second.json()["detail"]

    async def test_password_mismatch_rejected(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/register", json={
            "email": "mismatch@example.com",
            "password": "StrongPassword123!",
            "password_confirm": "DifferentPassword123!"
        })
        assert response.status_code == 422

    async def test_display_name_defaults_to_email_prefix(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/register", json={
            "email": "producer@example.com",
            "password": "StrongPassword123!",
            "password_confirm": "StrongPassword123!"
        })
        headers = {"Authorization": f"Bearer {response.json()['access_token']}"}

        me = await client.get("/api/v1/users/me", headers=headers)
        assert me.json()["display_name"] == "producer"


class TestLogin:

    async def test_form_login(self, client: AsyncClient, authenticated_user):
        response = await client.post(
            "/api/v1/auth/login",
            data={
                "username": authenticated_user["user_data"]["email"],
                "password": authenticated_user["user_data"]["password"]
            },
            headers={"Content-Type": "application/x-www-form-urlencoded"}
        )

        assert response.status_code == 200
        assert "access_token" in response.json()

    async def test_json_login(self, client: AsyncClient, authenticated_user):
        response = await client.post("/api/v1/auth/login-json", json={
            "username": authenticated_user["user_data"]["email"],
            "password": authenticated_user["user_data"]["password"]
        })

        assert response.status_code == 200
        assert "refresh_token" in response.json()

    async def test_wrong_password(self, client: AsyncClient, authenticated_user):
        response = await client.post("/api/v1/auth/login-json", json={
            "username": authenticated_user["user_data"]["email"],
            "password": "WrongPassword123!"
        })

        assert response.status_code == 401
        assert response.json()["detail"] == "Incorrect username or password"
        assert response.headers["www-authenticate"] == "Bearer"

    async def test_unknown_user(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/login-json", json={
            "username": "nobody@example.com",
            "password": "WrongPassword123!"
        })
        assert response.status_code == 401


class TestTokenRefresh:

    async def refresh(self, client: AsyncClient, token: str):
        return await client.post(
            "/api/v1/auth/refresh-token",
            data={"refresh_token": token},
            headers={"Content-Type": "application/x-www-form-urlencoded"}
        )

    async def test_refresh_issues_new_pair(self, client: AsyncClient, authenticated_user):
        response = await self.refresh(client, authenticated_user["refresh_token"])

        assert response.status_code == 200
        data = response.json()
        assert data["access_token"] != authenticated_user["access_token"]
        assert data["refresh_token"] != authenticated_user["refresh_token"]

    async def test_refresh_token_is_single_use(self, client: AsyncClient, authenticated_user):
        first = await self.refresh(client, authenticated_user["refresh_token"])
        assert first.status_code == 200

        replay = await self.refresh(client, authenticated_user["refresh_token"])
        assert replay.status_code == 401

    async def test_access_token_cannot_refresh(self, client: AsyncClient, authenticated_user):
        response = await self.refresh(client, authenticated_user["access_token"])
        assert response.status_code == 401

    async def test_garbage_token(self, client: AsyncClient):
        response = await self.refresh(client, "invalid_token")
        assert response.status_code == 401


class TestLogout:

    async def test_logout(self, client: AsyncClient, auth_headers):
        response = await client.post("/api/v1/auth/logout", headers=auth_headers)
        assert response.status_code == 204

    async def test_token_blacklisted_after_logout(self, client: AsyncClient, auth_headers):
        logout_response = await client.post("/api/v1/auth/logout", headers=auth_headers)
        assert logout_response.status_code == 204

        profile_response = await client.get("/api/v1/users/me", headers=auth_headers)
        assert profile_response.status_code == 401

        board_response = await client.get("/api/v1/tasks/", headers=auth_headers)
        assert board_response.status_code == 401

    async def test_logout_requires_token(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/logout")
        assert response.status_code == 401


@pytest.mark.parametrize("path", ["/api/v1/users/me", "/api/v1/users/", "/api/v1/tasks/"])
async def test_protected_routes_reject_anonymous(client: AsyncClient, path):
    response = await client.get(path)
    assert response.status_code == 401
