"""
Security, tracing and error-shape tests for Videomaker Log
"""
import pytest
from httpx import AsyncClient

from vmlog.auth.context import AuthContext
from vmlog.core import tracing
from vmlog.core.colors import USER_COLORS, color_for_identifier, resolve_user_color
from vmlog.exceptions.board import Unauthorized


class TestSecurityHeaders:

    async def test_security_headers_present(self, client: AsyncClient):
        response = await client.get("/")

        headers = response.headers
        assert headers["x-content-type-options"] == "nosniff"
        assert headers["x-frame-options"] == "DENY"
        assert "referrer-policy" in headers
        # HSTS is production only
        assert "strict-transport-security" not in headers

    async def test_trace_id_in_response(self, client: AsyncClient):
        response = await client.get("/")
        assert len(response.headers["x-trace-id"]) == 32

    async def test_incoming_trace_id_is_echoed(self, client: AsyncClient):
        response = await client.get("/", headers={"X-Trace-ID": "reconciler-trace-1"})

        assert response.headers["x-trace-id"] == "reconciler-trace-1"
        assert response.json()["trace_id"] == "reconciler-trace-1"

    async def test_error_body_carries_trace_id(self, client: AsyncClient):
        response = await client.get("/api/v1/tasks/", headers={"X-Trace-ID": "abc123"})

        assert response.status_code == 401
        assert response.json()["trace_id"] == "abc123"

    def test_tracing_exports_resolve(self):
        assert all(callable(getattr(tracing, name)) for name in tracing.__all__)

    def test_store_calls_need_an_actor(self):
        with pytest.raises(Unauthorized):
            AuthContext().require_actor()


class TestPasswordComplexity:

    @pytest.mark.parametrize("password,should_fail", [
        ("short", True),
        ("nouppercase123!", True),
        ("NOLOWERCASE123!", True),
        ("NoNumbers!", True),
        ("NoSpecialChar123", True),
        ("ValidPassword123!", False),
    ])
    async def test_password_complexity(self, client: AsyncClient, password, should_fail):
        response = await client.post("/api/v1/auth/register", json={
            "email": "passwordtest@example.com",
            "password": password,
            "password_confirm": password
        })

        if should_fail:
            assert response.status_code == 422
        else:
            assert response.status_code == 201


class TestUserColors:

    def test_hash_is_deterministic(self):
        assert color_for_identifier("a") == "orange"
        assert color_for_identifier("ab") == "indigo"
        assert color_for_identifier("some-user") == color_for_identifier("some-user")

    @pytest.mark.parametrize("identifier", ["", "default", "0b7c1f4e-9d2a-4c55-8f61-3e2a9b7d1c00", "x" * 500])
    def test_hash_stays_in_palette(self, identifier):
        assert color_for_identifier(identifier) in USER_COLORS

    def test_preferred_color_wins(self):
        assert resolve_user_color("a", "cyan") == "cyan"

    def test_unknown_preference_falls_back_to_hash(self):
        assert resolve_user_color("a", "chartreuse") == "orange"
        assert resolve_user_color("a", None) == "orange"
