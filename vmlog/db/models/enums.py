# vmlog/db/models/enums.py
import enum


class TaskStatus(str, enum.Enum):
    """Board columns; each value is its own ordering partition"""
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class TaskPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class UserRole(str, enum.Enum):
    MEMBER = "member"
    MASTER = "master"


def enum_values(enum_cls):
    """Persist enum values (``in_progress``) rather than member names"""
    return [member.value for member in enum_cls]
