# vmlog/db/models/task.py
"""Kanban board task model"""
from sqlalchemy import Column, Integer, String, Text, ForeignKey, Index, Enum, DateTime, JSON
from sqlalchemy.orm import relationship

from vmlog.db.models.base import Base, TimestampMixin, UUIDMixin
from vmlog.db.models.enums import TaskStatus, TaskPriority, enum_values


class Task(Base, UUIDMixin, TimestampMixin):
    """A card on the board, ordered by ``position`` inside its status column"""
    __tablename__ = "tasks"

    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    checklist = Column(JSON, nullable=False, default=list)
    status = Column(
        Enum(TaskStatus, values_callable=enum_values, name="task_status"),
        nullable=False,
        default=TaskStatus.TODO,
        index=True
    )
    priority = Column(
        Enum(TaskPriority, values_callable=enum_values, name="task_priority"),
        nullable=False,
        default=TaskPriority.MEDIUM
    )
    position = Column(Integer, nullable=False, default=0)
    archived_at = Column(DateTime(timezone=True), nullable=True)

    # Foreign keys
    assignee_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    # Relationships
    assignee = relationship("User", foreign_keys=[assignee_id])
    created_by = relationship("User", foreign_keys=[created_by_id])

    __table_args__ = (
        Index('idx_task_status_position', 'status', 'position'),
        Index('idx_task_archived_at', 'archived_at'),
    )

    def __repr__(self):
        return f"<Task title={self.title} status={self.status} position={self.position}>"
