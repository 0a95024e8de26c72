"""Application DTOs: plain dataclasses passed between layers."""

from audit_tracker.application.dtos.task import (
    AttachmentCreate,
    TaskCreate,
    TaskStatusChangeEvent,
    TaskUpdate,
)
from audit_tracker.application.dtos.user import UserCreate

__all__ = [
    "AttachmentCreate",
    "TaskCreate",
    "TaskStatusChangeEvent",
    "TaskUpdate",
    "UserCreate",
]
