# vmlog/api/v1/schemas/tasks.py
from pydantic import BaseModel, Field, UUID4, field_validator
from sqlalchemy import inspect as sa_inspect
from typing import Optional, List
from datetime import datetime

from vmlog.db.models.enums import TaskStatus, TaskPriority


class ChecklistItem(BaseModel):
    """One line of a task checklist"""
    text: str = Field(..., min_length=1, max_length=500)
    checked: bool = False


def _reject_blank(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.strip():
        raise ValueError("Title must not be blank")
    return value


class TaskCreate(BaseModel):
    """Schema for creating a task; status and position are assigned by the server"""
    title: str = Field(..., min_length=1, max_length=500, description="Task title")
    description: Optional[str] = Field(None, description="Task description")
    priority: TaskPriority = Field(TaskPriority.MEDIUM, description="Task priority")
    assignee_id: Optional[UUID4] = Field(None, description="UUID of the assigned user")

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v):
        return _reject_blank(v)


class TaskUpdate(BaseModel):
    """Editable task fields; never touches status or position"""
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    assignee_id: Optional[UUID4] = Field(None, description="Assignee UUID (null to unassign)")
    checklist: Optional[List[ChecklistItem]] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v):
        return _reject_blank(v)


class TaskStatusUpdate(BaseModel):
    """Move a task to another column"""
    status: TaskStatus = Field(..., description="Destination status")
    position: Optional[int] = Field(
        None,
        ge=0,
        description="Position computed by the client; replaced if stale"
    )


class TaskChecklistUpdate(BaseModel):
    checklist: List[ChecklistItem] = Field(default_factory=list)


class TaskResponse(BaseModel):
    """Task as rendered on the board"""
    id: UUID4 = Field(..., description="Task UUID")
    title: str
    description: Optional[str] = None
    checklist: List[ChecklistItem] = Field(default_factory=list)
    status: TaskStatus
    priority: TaskPriority
    position: int
    archived_at: Optional[datetime] = None
    assignee_id: Optional[UUID4] = None
    created_by_id: UUID4
    created_by_name: str
    created_by_color: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, task):
        """Convert Task model to API response using UUIDs"""
        # archived_at is left unloaded when the deployed schema predates it
        archived_at = None
        if "archived_at" not in sa_inspect(task).unloaded:
            archived_at = task.archived_at

        return cls(
            id=task.uuid,
            title=task.title,
            description=task.description,
            checklist=task.checklist or [],
            status=task.status,
            priority=task.priority,
            position=task.position,
            archived_at=archived_at,
            assignee_id=task.assignee.uuid if task.assignee else None,
            created_by_id=task.created_by.uuid,
            created_by_name=task.created_by.profile_name,
            created_by_color=task.created_by.color,
            created_at=task.created_at,
            updated_at=task.updated_at
        )

    class Config:
        from_attributes = True


class ArchiveResult(BaseModel):
    archived: int = Field(..., description="Rows archived by this sweep (informational)")
