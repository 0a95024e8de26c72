"""Domain entities and aggregates.

Pure domain models; no ORM or persistence concerns.
"""

from audit_tracker.domain.entities.task import (
    TaskAttachment,
    TaskComment,
    TaskEntity,
    TaskStatusChange,
)
from audit_tracker.domain.entities.user import UserEntity

__all__ = [
    "TaskAttachment",
    "TaskComment",
    "TaskEntity",
    "TaskStatusChange",
    "UserEntity",
]
