"""
Archive sweep and restore tests for Videomaker Log
"""
import uuid

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select, text

from vmlog.main import app
from vmlog.db.models import Task, TaskStatus
from vmlog.db.schema import SchemaFeatures, detect_schema_features, get_schema_features


async def sweep(client: AsyncClient, headers):
    response = await client.post("/api/v1/tasks/archive", headers=headers)
    assert response.status_code == 200
    return response.json()


async def listing(client: AsyncClient, headers, path: str = "/api/v1/tasks/"):
    response = await client.get(path, headers=headers)
    assert response.status_code == 200
    return response.json()


class TestArchiveSweep:

    async def test_sweep_moves_done_tasks_off_the_board(self, client: AsyncClient, auth_headers, make_task):
        keep = await make_task("Keep", status="in_progress")
        first = await make_task("Done 1", status="done")
        second = await make_task("Done 2", status="done")

        result = await sweep(client, auth_headers)
        assert result["archived"] == 2

        active = await listing(client, auth_headers)
        assert [t["id"] for t in active] == [keep["id"]]

        archived = await listing(client, auth_headers, "/api/v1/tasks/archived")
        assert {t["id"] for t in archived} == {first["id"], second["id"]}
        assert all(t["archived_at"] is not None for t in archived)

    async def test_archived_listing_newest_first(self, client: AsyncClient, auth_headers, make_task):
        older = await make_task("Older", status="done")
        await sweep(client, auth_headers)
        newer = await make_task("Newer", status="done")
        await sweep(client, auth_headers)

        archived = await listing(client, auth_headers, "/api/v1/tasks/archived")
        assert [t["id"] for t in archived] == [newer["id"], older["id"]]

    async def test_sweep_with_nothing_done_is_a_noop(
        self, client: AsyncClient, auth_headers, make_task, db_session
    ):
        todo = await make_task("Todo")

        assert (await sweep(client, auth_headers))["archived"] == 0
        assert (await sweep(client, auth_headers))["archived"] == 0

        assert [t["id"] for t in await listing(client, auth_headers)] == [todo["id"]]
        archived_count = await db_session.scalar(select(func.count(Task.id)).filter(Task.archived_at.isnot(None)))
        assert archived_count == 0

    async def test_sweep_is_idempotent(self, client: AsyncClient, auth_headers, make_task):
        await make_task("Done", status="done")

        assert (await sweep(client, auth_headers))["archived"] == 1
        assert (await sweep(client, auth_headers))["archived"] == 0
        assert len(await listing(client, auth_headers, "/api/v1/tasks/archived")) == 1

    async def test_sweep_requires_auth(self, client: AsyncClient):
        response = await client.post("/api/v1/tasks/archive")
        assert response.status_code == 401


class TestRestore:

    async def test_restore_returns_task_to_done(self, client: AsyncClient, auth_headers, make_task):
        task = await make_task("Published", status="done")
        await sweep(client, auth_headers)

        response = await client.post(f"/api/v1/tasks/{task['id']}/restore", headers=auth_headers)

        assert response.status_code == 200
        restored = response.json()
        assert restored["archived_at"] is None
        assert restored["status"] == "done"
        assert task["id"] in [t["id"] for t in await listing(client, auth_headers, "/api/v1/tasks/?status=done")]
        assert await listing(client, auth_headers, "/api/v1/tasks/archived") == []

    async def test_restore_forces_done_status(self, client: AsyncClient, auth_headers, make_task, db_session):
        task = await make_task("Published", status="done")
        await sweep(client, auth_headers)

        # no API path changes an archived task's status; write it directly
        record = await db_session.scalar(select(Task).filter(Task.uuid == uuid.UUID(task["id"])))
        record.status = TaskStatus.TODO
        await db_session.commit()

        response = await client.post(f"/api/v1/tasks/{task['id']}/restore", headers=auth_headers)
        assert response.json()["status"] == "done"

    async def test_archived_task_cannot_be_moved(self, client: AsyncClient, auth_headers, make_task):
        task = await make_task("Published", status="done")
        await sweep(client, auth_headers)

        response = await client.patch(
            f"/api/v1/tasks/{task['id']}/status", json={"status": "todo"}, headers=auth_headers
        )
        assert response.status_code == 404
        assert response.json()["error_type"] == "TaskNotFound"

        archived = await listing(client, auth_headers, "/api/v1/tasks/archived")
        assert [(t["id"], t["status"]) for t in archived] == [(task["id"], "done")]
        assert archived[0]["archived_at"] is not None
        assert await listing(client, auth_headers) == []

    async def test_restore_appends_after_active_done(self, client: AsyncClient, auth_headers, make_task):
        archived = await make_task("Old", status="done")
        await sweep(client, auth_headers)
        await make_task("New 0", status="done")
        await make_task("New 1", status="done")

        response = await client.post(f"/api/v1/tasks/{archived['id']}/restore", headers=auth_headers)
        assert response.json()["position"] == 2

    async def test_restore_active_task_conflicts(self, client: AsyncClient, auth_headers, make_task):
        task = await make_task("Live")

        response = await client.post(f"/api/v1/tasks/{task['id']}/restore", headers=auth_headers)
        assert response.status_code == 409
        assert response.json()["error_type"] == "TaskNotArchived"

    async def test_restore_unknown_task(self, client: AsyncClient, auth_headers):
        response = await client.post(f"/api/v1/tasks/{uuid.uuid4()}/restore", headers=auth_headers)
        assert response.status_code == 404


@pytest.fixture
def archiving_unsupported():
    app.dependency_overrides[get_schema_features] = lambda: SchemaFeatures(task_archiving=False)
    yield
    app.dependency_overrides.pop(get_schema_features, None)


class TestSchemaWithoutArchiving:

    async def test_sweep_degrades_to_noop(
        self, client: AsyncClient, auth_headers, make_task, db_session, archiving_unsupported
    ):
        task = await make_task("Done", status="done")

        assert (await sweep(client, auth_headers))["archived"] == 0

        archived_at = await db_session.scalar(
            select(Task.archived_at).filter(Task.uuid == uuid.UUID(task["id"]))
        )
        assert archived_at is None

    async def test_archived_listing_is_empty(self, client: AsyncClient, auth_headers, archiving_unsupported):
        assert await listing(client, auth_headers, "/api/v1/tasks/archived") == []

    async def test_active_listing_uses_reduced_projection(
        self, client: AsyncClient, auth_headers, make_task, archiving_unsupported
    ):
        task = await make_task("Draft")

        active = await listing(client, auth_headers)
        assert [t["id"] for t in active] == [task["id"]]
        assert active[0]["archived_at"] is None

    async def test_restore_reports_schema_mismatch(
        self, client: AsyncClient, auth_headers, make_task, archiving_unsupported
    ):
        task = await make_task("Draft")

        response = await client.post(f"/api/v1/tasks/{task['id']}/restore", headers=auth_headers)
        assert response.status_code == 409
        assert response.json()["error_type"] == "SchemaMismatch"


@pytest.fixture
async def legacy_schema(db_session):
    """A tasks table from before the archived_at migration"""
    await db_session.execute(text("DROP INDEX idx_task_archived_at"))
    await db_session.execute(text("ALTER TABLE tasks DROP COLUMN archived_at"))
    await db_session.commit()

    features = await detect_schema_features(db_session.bind)
    app.dependency_overrides[get_schema_features] = lambda: features
    yield features
    app.dependency_overrides.pop(get_schema_features, None)


class TestLegacySchema:

    async def test_missing_column_is_detected(self, legacy_schema):
        assert legacy_schema.task_archiving is False

    async def test_board_works_without_archived_at(self, client: AsyncClient, auth_headers, legacy_schema):
        response = await client.post("/api/v1/tasks/", json={"title": "Storyboard"}, headers=auth_headers)
        assert response.status_code == 201, response.text
        task = response.json()
        assert task["archived_at"] is None
        assert (task["status"], task["position"]) == ("todo", 0)

        moved = await client.patch(
            f"/api/v1/tasks/{task['id']}/status", json={"status": "done"}, headers=auth_headers
        )
        assert moved.status_code == 200, moved.text
        assert moved.json()["status"] == "done"

        edited = await client.put(f"/api/v1/tasks/{task['id']}", json={"title": "Storyboard v2"}, headers=auth_headers)
        assert edited.status_code == 200, edited.text

        assert (await sweep(client, auth_headers))["archived"] == 0

        active = await listing(client, auth_headers)
        assert [(t["id"], t["title"], t["status"]) for t in active] == [(task["id"], "Storyboard v2", "done")]
        assert await listing(client, auth_headers, "/api/v1/tasks/archived") == []

    async def test_delete_and_restore_without_archived_at(self, client: AsyncClient, auth_headers, legacy_schema):
        task = (await client.post("/api/v1/tasks/", json={"title": "B-roll"}, headers=auth_headers)).json()

        restore = await client.post(f"/api/v1/tasks/{task['id']}/restore", headers=auth_headers)
        assert restore.status_code == 409
        assert restore.json()["error_type"] == "SchemaMismatch"

        deleted = await client.delete(f"/api/v1/tasks/{task['id']}", headers=auth_headers)
        assert deleted.status_code == 204
        assert await listing(client, auth_headers) == []
