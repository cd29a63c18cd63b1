"""
Pytest configuration and fixtures for Videomaker Log API tests
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("ENABLE_JSON_LOGGING", "false")
os.environ.setdefault("ENVIRONMENT", "development")

import pytest
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from vmlog.main import app
from vmlog.db.database import get_db, Base
import vmlog.db.models  # noqa: F401

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory database per test"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    TestSessionLocal = async_sessionmaker(bind=engine, class_=AsyncSession, autoflush=False, expire_on_commit=False)
    async with TestSessionLocal() as session:
        yield session

    await engine.dispose()


@pytest.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Test client with the database session overridden"""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def test_user_data():
    return {
        "email": "editor@example.com",
        "display_name": "Editor",
        "password": "TestPassword123!",
        "password_confirm": "TestPassword123!"
    }


@pytest.fixture
async def authenticated_user(client: AsyncClient, test_user_data):
    """Register a user and return its tokens"""
    response = await client.post("/api/v1/auth/register", json=test_user_data)
    assert response.status_code == 201

    tokens = response.json()
    return {
        "access_token": tokens["access_token"],
        "refresh_token": tokens["refresh_token"],
        "user_data": test_user_data
    }


@pytest.fixture
def auth_headers(authenticated_user):
    return {"Authorization": f"Bearer {authenticated_user['access_token']}"}


@pytest.fixture
async def second_user_headers(client: AsyncClient):
    """A second board member, for assignee and concurrency scenarios"""
    response = await client.post("/api/v1/auth/register", json={
        "email": "camera@example.com",
        "password": "CameraPassword123!",
        "password_confirm": "CameraPassword123!"
    })
    assert response.status_code == 201
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def make_task(client: AsyncClient, auth_headers):
    """Create a task through the API and optionally move it to a column"""

    async def _make(title: str, status: str = None, **fields):
        response = await client.post("/api/v1/tasks/", json={"title": title, **fields}, headers=auth_headers)
        assert response.status_code == 201, response.text
        task = response.json()
        if status and status != task["status"]:
            response = await client.patch(
                f"/api/v1/tasks/{task['id']}/status", json={"status": status}, headers=auth_headers
            )
            assert response.status_code == 200, response.text
            task = response.json()
        return task

    return _make
