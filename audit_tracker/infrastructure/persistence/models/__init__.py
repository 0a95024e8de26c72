"""ORM models. Import here so Alembic autogenerate sees every table."""

from audit_tracker.infrastructure.persistence.models.task import (
    Task,
    TaskAttachment,
    TaskComment,
    TaskStatusChange,
)
from audit_tracker.infrastructure.persistence.models.user import User

__all__ = [
    "Task",
    "TaskAttachment",
    "TaskComment",
    "TaskStatusChange",
    "User",
]
