# vmlog/db/crud/task.py
from contextlib import asynccontextmanager
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import func, insert, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload, defer
from typing import Optional, List, Dict, Any
from uuid import UUID, uuid4
from datetime import datetime, timezone
from loguru import logger

from vmlog.auth.context import AuthContext
from vmlog.board.ordering import next_position
from vmlog.db.models import Task, User, TaskStatus
from vmlog.db.schema import SchemaFeatures
from vmlog.exceptions.board import (
    BoardError, TaskValidationError, TaskNotFound, TaskNotArchived,
    SchemaMismatch, TransientStoreError
)
from vmlog.api.v1.schemas.tasks import TaskCreate, TaskUpdate

DEFAULT_FEATURES = SchemaFeatures()

# Editable fields that may be omitted but never cleared
REQUIRED_FIELDS = ("title", "priority", "checklist")


@asynccontextmanager
async def store_errors(db: AsyncSession, action: str):
    """Roll back on failure; database errors surface as TransientStoreError"""
    try:
        yield
    except BoardError:
        await db.rollback()
        raise
    except SQLAlchemyError as e:
        logger.error(f"Failed to {action}: {e}")
        await db.rollback()
        raise TransientStoreError(f"Failed to {action}") from e


def _task_query(features: SchemaFeatures):
    query = (
        select(Task)
        .options(joinedload(Task.created_by), joinedload(Task.assignee))
        .execution_options(populate_existing=True)
    )
    if not features.task_archiving:
        # Reduced projection for schemas that predate archiving
        query = query.options(defer(Task.archived_at, raiseload=True))
    return query


def _active_filter(query, features: SchemaFeatures):
    if features.task_archiving:
        return query.filter(Task.archived_at.is_(None))
    return query


async def get_task_by_uuid(
        db: AsyncSession,
        task_uuid: UUID,
        features: SchemaFeatures = DEFAULT_FEATURES
) -> Optional[Task]:
    """Get task by UUID with creator and assignee loaded"""
    async with store_errors(db, f"load task {task_uuid}"):
        result = await db.execute(_task_query(features).filter(Task.uuid == task_uuid))
        return result.scalars().first()


async def require_task(
        db: AsyncSession,
        task_uuid: UUID,
        features: SchemaFeatures = DEFAULT_FEATURES
) -> Task:
    task = await get_task_by_uuid(db, task_uuid, features)
    if task is None:
        raise TaskNotFound(f"Task {task_uuid} not found")
    return task


async def list_active_tasks(
        db: AsyncSession,
        features: SchemaFeatures = DEFAULT_FEATURES,
        status_filter: Optional[TaskStatus] = None
) -> List[Task]:
    """Non-archived tasks ordered by position, ties broken by age then id"""
    async with store_errors(db, "list active tasks"):
        query = _active_filter(_task_query(features), features)
        if status_filter:
            query = query.filter(Task.status == status_filter)
        query = query.order_by(Task.position.asc(), Task.created_at.asc(), Task.id.asc())

        result = await db.execute(query)
        return list(result.scalars().unique().all())


async def list_archived_tasks(
        db: AsyncSession,
        features: SchemaFeatures = DEFAULT_FEATURES
) -> List[Task]:
    """Archived tasks, most recently archived first"""
    if not features.task_archiving:
        logger.warning("Archived task listing requested but tasks.archived_at is missing")
        return []

    async with store_errors(db, "list archived tasks"):
        query = (
            _task_query(features)
            .filter(Task.archived_at.isnot(None))
            .order_by(Task.archived_at.desc(), Task.id.desc())
        )
        result = await db.execute(query)
        return list(result.scalars().unique().all())


async def partition_position(
        db: AsyncSession,
        status: TaskStatus,
        features: SchemaFeatures = DEFAULT_FEATURES,
        exclude_task_id: Optional[int] = None
) -> int:
    """Next free position at the end of an active status partition"""
    query = _active_filter(select(func.max(Task.position)).filter(Task.status == status), features)
    if exclude_task_id is not None:
        query = query.filter(Task.id != exclude_task_id)

    max_position = await db.scalar(query)
    return next_position([] if max_position is None else [max_position])


async def _resolve_assignee(db: AsyncSession, assignee_uuid: Optional[UUID]) -> Optional[int]:
    if assignee_uuid is None:
        return None
    assignee = await db.scalar(select(User).filter(User.uuid == assignee_uuid))
    if assignee is None:
        raise TaskValidationError(f"Assignee {assignee_uuid} not found")
    return assignee.id


async def create_task(
        db: AsyncSession,
        task_data: TaskCreate,
        auth: AuthContext,
        features: SchemaFeatures = DEFAULT_FEATURES
) -> Task:
    """Create a task at the end of the todo column"""
    creator = auth.require_actor()
    if not task_data.title or not task_data.title.strip():
        raise TaskValidationError("Title must not be blank")

    async with store_errors(db, "create task"):
        assignee_id = await _resolve_assignee(db, task_data.assignee_id)
        position = await partition_position(db, TaskStatus.TODO, features)

        values = dict(
            uuid=uuid4(),
            title=task_data.title,
            description=task_data.description or None,
            checklist=[],
            status=TaskStatus.TODO,
            priority=task_data.priority,
            position=position,
            assignee_id=assignee_id,
            created_by_id=creator.id
        )
        if features.task_archiving:
            db.add(Task(**values))
        else:
            # The ORM flush would name archived_at in the INSERT
            await db.execute(insert(Task).values(**values))
        await db.commit()

        logger.info(f"Task created: {values['title']} at todo/{position} by user {creator.id}")
        return await require_task(db, values["uuid"], features)


async def update_task(
        db: AsyncSession,
        task: Task,
        updates: TaskUpdate,
        auth: AuthContext,
        features: SchemaFeatures = DEFAULT_FEATURES
) -> Task:
    """Edit title/description/priority/assignee/checklist; status and position are untouched"""
    editor = auth.require_actor()
    update_data = updates.model_dump(exclude_unset=True)

    for field in REQUIRED_FIELDS:
        if field in update_data and update_data[field] is None:
            raise TaskValidationError(f"{field.capitalize()} must not be null")

    async with store_errors(db, f"update task {task.uuid}"):
        if "assignee_id" in update_data:
            task.assignee_id = await _resolve_assignee(db, update_data.pop("assignee_id"))

        for field, value in update_data.items():
            setattr(task, field, value)

        await db.commit()
        logger.info(f"Task {task.uuid} updated by user {editor.id}: {sorted(update_data)}")
        return await require_task(db, task.uuid, features)


async def update_task_status(
        db: AsyncSession,
        task: Task,
        new_status: TaskStatus,
        position: Optional[int] = None,
        features: SchemaFeatures = DEFAULT_FEATURES
) -> Task:
    """Move a task to a status column.

    The caller's position is kept when it still lands after every other
    active task in the destination; a stale or missing position is replaced
    with the end of the column so the partition never holds duplicates.
    Archived tasks are off the board; only ``restore_task`` brings them back.
    """
    if features.task_archiving and task.archived_at is not None:
        raise TaskNotFound(f"Task {task.uuid} is archived")

    async with store_errors(db, f"move task {task.uuid}"):
        server_position = await partition_position(db, new_status, features, exclude_task_id=task.id)
        if position is None or position < server_position:
            if position is not None:
                logger.warning(
                    f"Stale position {position} for task {task.uuid} in {new_status.value}; "
                    f"using {server_position}"
                )
            position = server_position

        old_status = task.status
        task.status = new_status
        task.position = position
        await db.commit()

        logger.info(f"Task {task.uuid} moved {old_status.value} -> {new_status.value} at {position}")
        return await require_task(db, task.uuid, features)


async def update_task_checklist(
        db: AsyncSession,
        task: Task,
        checklist: List[Dict[str, Any]],
        features: SchemaFeatures = DEFAULT_FEATURES
) -> Task:
    """Replace the checklist wholesale"""
    async with store_errors(db, f"update checklist of task {task.uuid}"):
        task.checklist = [{"text": item["text"], "checked": bool(item.get("checked"))} for item in checklist]
        await db.commit()
        return await require_task(db, task.uuid, features)


async def toggle_checklist_item(
        db: AsyncSession,
        task: Task,
        index: int,
        features: SchemaFeatures = DEFAULT_FEATURES
) -> Task:
    """Flip ``checked`` on one checklist entry"""
    checklist = [dict(item) for item in (task.checklist or [])]
    if index < 0 or index >= len(checklist):
        raise TaskNotFound(f"Checklist item {index} not found on task {task.uuid}")

    checklist[index]["checked"] = not checklist[index].get("checked", False)
    return await update_task_checklist(db, task, checklist, features)


async def delete_task(db: AsyncSession, task: Task) -> None:
    """Delete a task (hard delete)"""
    async with store_errors(db, f"delete task {task.uuid}"):
        await db.delete(task)
        await db.commit()
        logger.info(f"Task {task.uuid} deleted")


async def archive_completed_tasks(
        db: AsyncSession,
        features: SchemaFeatures = DEFAULT_FEATURES
) -> int:
    """Archive every active done task. Safe to re-run; returns the row count"""
    if not features.task_archiving:
        logger.warning("Archive sweep skipped: tasks.archived_at column is missing (migration pending?)")
        return 0

    async with store_errors(db, "archive completed tasks"):
        now = datetime.now(timezone.utc)
        result = await db.execute(
            update(Task)
            .where(Task.status == TaskStatus.DONE, Task.archived_at.is_(None))
            .values(archived_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        await db.commit()

        archived = result.rowcount or 0
        logger.info(f"Archive sweep archived {archived} done tasks")
        return archived


async def restore_task(
        db: AsyncSession,
        task: Task,
        features: SchemaFeatures = DEFAULT_FEATURES
) -> Task:
    """Bring an archived task back to the end of the done column"""
    if not features.task_archiving:
        raise SchemaMismatch("Task archiving requires the tasks.archived_at column")
    if task.archived_at is None:
        raise TaskNotArchived(f"Task {task.uuid} is not archived")

    async with store_errors(db, f"restore task {task.uuid}"):
        task.archived_at = None
        task.status = TaskStatus.DONE
        task.position = await partition_position(db, TaskStatus.DONE, features, exclude_task_id=task.id)
        await db.commit()

        logger.info(f"Task {task.uuid} restored to done at {task.position}")
        return await require_task(db, task.uuid, features)
