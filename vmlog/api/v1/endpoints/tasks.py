# vmlog/api/v1/endpoints/tasks.py
"""Kanban board endpoints"""
from fastapi import APIRouter, Depends, Query, status, Path
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID
from loguru import logger

from vmlog.db.database import get_db
from vmlog.db.crud import task as task_crud
from vmlog.db.models import User, TaskStatus
from vmlog.db.schema import SchemaFeatures, get_schema_features
from vmlog.api.v1.schemas.tasks import (
    TaskCreate, TaskUpdate, TaskResponse, TaskStatusUpdate, TaskChecklistUpdate, ArchiveResult
)
from vmlog.auth.context import AuthContext
from vmlog.auth.dependencies import get_current_user, get_auth_context
from vmlog.middleware.monitoring import BOARD_MUTATIONS

router = APIRouter()


@router.get("/", response_model=List[TaskResponse])
async def list_active_tasks(
    status_filter: Optional[TaskStatus] = Query(None, alias="status", description="Only this column"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    features: SchemaFeatures = Depends(get_schema_features)
):
    """Active (non-archived) tasks ordered by position"""
    tasks = await task_crud.list_active_tasks(db, features, status_filter=status_filter)
    return [TaskResponse.from_model(task) for task in tasks]


@router.get("/archived", response_model=List[TaskResponse])
async def list_archived_tasks(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    features: SchemaFeatures = Depends(get_schema_features)
):
    """Archived tasks, most recently archived first"""
    tasks = await task_crud.list_archived_tasks(db, features)
    return [TaskResponse.from_model(task) for task in tasks]


@router.post("/", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_data: TaskCreate,
    db: AsyncSession = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
    features: SchemaFeatures = Depends(get_schema_features)
):
    """Create a task at the end of the todo column"""
    task = await task_crud.create_task(db, task_data, auth, features)
    BOARD_MUTATIONS.labels(kind="create").inc()
    return TaskResponse.from_model(task)


@router.post("/archive", response_model=ArchiveResult)
async def archive_completed_tasks(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    features: SchemaFeatures = Depends(get_schema_features)
):
    """Sweep every done task off the active board"""
    archived = await task_crud.archive_completed_tasks(db, features)
    BOARD_MUTATIONS.labels(kind="archive").inc()
    logger.info(f"Archive sweep requested by user {current_user.id}: {archived} tasks")
    return ArchiveResult(archived=archived)


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: UUID = Path(..., description="Task UUID"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    features: SchemaFeatures = Depends(get_schema_features)
):
    task = await task_crud.require_task(db, task_id, features)
    return TaskResponse.from_model(task)


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    updates: TaskUpdate,
    task_id: UUID = Path(..., description="Task UUID"),
    db: AsyncSession = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
    features: SchemaFeatures = Depends(get_schema_features)
):
    """Edit a task's content; its column and position are left alone"""
    task = await task_crud.require_task(db, task_id, features)
    updated = await task_crud.update_task(db, task, updates, auth, features)
    return TaskResponse.from_model(updated)


@router.patch("/{task_id}/status", response_model=TaskResponse)
async def update_task_status(
    status_update: TaskStatusUpdate,
    task_id: UUID = Path(..., description="Task UUID"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    features: SchemaFeatures = Depends(get_schema_features)
):
    """Move a task between columns (drag and drop)"""
    task = await task_crud.require_task(db, task_id, features)
    moved = await task_crud.update_task_status(
        db, task, status_update.status, status_update.position, features
    )
    BOARD_MUTATIONS.labels(kind="move").inc()
    return TaskResponse.from_model(moved)


@router.put("/{task_id}/checklist", response_model=TaskResponse)
async def update_task_checklist(
    checklist_update: TaskChecklistUpdate,
    task_id: UUID = Path(..., description="Task UUID"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    features: SchemaFeatures = Depends(get_schema_features)
):
    task = await task_crud.require_task(db, task_id, features)
    items = [item.model_dump() for item in checklist_update.checklist]
    updated = await task_crud.update_task_checklist(db, task, items, features)
    return TaskResponse.from_model(updated)


@router.patch("/{task_id}/checklist/{index}", response_model=TaskResponse)
async def toggle_checklist_item(
    task_id: UUID = Path(..., description="Task UUID"),
    index: int = Path(..., ge=0, description="Checklist item index"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    features: SchemaFeatures = Depends(get_schema_features)
):
    task = await task_crud.require_task(db, task_id, features)
    updated = await task_crud.toggle_checklist_item(db, task, index, features)
    return TaskResponse.from_model(updated)


@router.post("/{task_id}/restore", response_model=TaskResponse)
async def restore_task(
    task_id: UUID = Path(..., description="Task UUID"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    features: SchemaFeatures = Depends(get_schema_features)
):
    """Return an archived task to the done column"""
    task = await task_crud.require_task(db, task_id, features)
    restored = await task_crud.restore_task(db, task, features)
    BOARD_MUTATIONS.labels(kind="restore").inc()
    return TaskResponse.from_model(restored)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: UUID = Path(..., description="Task UUID"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    features: SchemaFeatures = Depends(get_schema_features)
):
    task = await task_crud.require_task(db, task_id, features)
    await task_crud.delete_task(db, task)
    BOARD_MUTATIONS.labels(kind="delete").inc()
