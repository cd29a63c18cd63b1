"""
Member profile and system endpoint tests for Videomaker Log
"""
import uuid

from httpx import AsyncClient

from vmlog.core.colors import USER_COLORS


class TestCurrentUser:

    async def test_get_current_user(self, client: AsyncClient, authenticated_user, auth_headers):
        response = await client.get("/api/v1/users/me", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["email"] == authenticated_user["user_data"]["email"]
        assert data["display_name"] == "Editor"
        assert data["role"] == "member"
        assert data["user_color"] is None
        assert data["color"] in USER_COLORS

    async def test_update_profile(self, client: AsyncClient, auth_headers):
        response = await client.patch(
            "/api/v1/users/me",
            json={"display_name": "Lead Editor", "user_color": "rose"},
            headers=auth_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["display_name"] == "Lead Editor"
        assert data["user_color"] == "rose"
        assert data["color"] == "rose"

    async def test_color_outside_palette_rejected(self, client: AsyncClient, auth_headers):
        response = await client.patch("/api/v1/users/me", json={"user_color": "chartreuse"}, headers=auth_headers)
        assert response.status_code == 422

    async def test_email_is_not_editable(self, client: AsyncClient, authenticated_user, auth_headers):
        response = await client.patch(
            "/api/v1/users/me", json={"email": "someone-else@example.com"}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["email"] == authenticated_user["user_data"]["email"]


async def login(client: AsyncClient, email: str, password: str):
    return await client.post("/api/v1/auth/login-json", json={"username": email, "password": password})


class TestPasswordChange:

    async def test_change_password(self, client: AsyncClient, authenticated_user, auth_headers):
        user_data = authenticated_user["user_data"]
        response = await client.put("/api/v1/users/me/password", json={
            "current_password": user_data["password"],
            "new_password": "NewPassword456?",
            "new_password_confirm": "NewPassword456?"
        }, headers=auth_headers)

        assert response.status_code == 204
        assert (await login(client, user_data["email"], user_data["password"])).status_code == 401
        assert (await login(client, user_data["email"], "NewPassword456?")).status_code == 200

    async def test_wrong_current_password(self, client: AsyncClient, authenticated_user, auth_headers):
        user_data = authenticated_user["user_data"]
        response = await client.put("/api/v1/users/me/password", json={
            "current_password": "NotMyPassword123!",
            "new_password": "NewPassword456?",
            "new_password_confirm": "NewPassword456?"
        }, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Current password is incorrect"
        assert (await login(client, user_data["email"], user_data["password"])).status_code == 200

    async def test_weak_new_password_rejected(self, client: AsyncClient, authenticated_user, auth_headers):
        response = await client.put("/api/v1/users/me/password", json={
            "current_password": authenticated_user["user_data"]["password"],
            "new_password": "alllowercase",
            "new_password_confirm": "alllowercase"
        }, headers=auth_headers)

        assert response.status_code == 422

    async def test_requires_auth(self, client: AsyncClient):
        response = await client.put("/api/v1/users/me/password", json={
            "current_password": "x",
            "new_password": "NewPassword456?",
            "new_password_confirm": "NewPassword456?"
        })
        assert response.status_code == 401


class TestMemberDirectory:

    async def test_list_members_oldest_first(self, client: AsyncClient, auth_headers, second_user_headers):
        response = await client.get("/api/v1/users/", headers=auth_headers)

        assert response.status_code == 200
        names = [profile["display_name"] for profile in response.json()]
        assert names == ["Editor", "camera"]
        assert all("email" not in profile for profile in response.json())

    async def test_get_member(self, client: AsyncClient, auth_headers, second_user_headers):
        me = (await client.get("/api/v1/users/me", headers=second_user_headers)).json()

        response = await client.get(f"/api/v1/users/{me['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["display_name"] == "camera"

    async def test_unknown_member(self, client: AsyncClient, auth_headers):
        response = await client.get(f"/api/v1/users/{uuid.uuid4()}", headers=auth_headers)
        assert response.status_code == 404


class TestSystemEndpoints:

    async def test_health_check(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["checks"]["database"] == "connected"
        assert data["checks"]["task_archiving"] == "enabled"

    async def test_root_endpoint(self, client: AsyncClient):
        response = await client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Videomaker Log API"
        assert data["endpoints"]["tasks"] == "/api/v1/tasks"

    async def test_metrics_endpoint(self, client: AsyncClient):
        await client.get("/")
        response = await client.get("/metrics")

        assert response.status_code == 200
        assert "vmlog_http_requests_total" in response.text
