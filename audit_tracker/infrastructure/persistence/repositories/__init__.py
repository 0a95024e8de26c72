"""Persistence repositories. Re-exports for dependency injection."""

from audit_tracker.infrastructure.persistence.repositories.memory import (
    InMemoryTaskRepository,
    InMemoryUserRepository,
)
from audit_tracker.infrastructure.persistence.repositories.task_repo import TaskRepository
from audit_tracker.infrastructure.persistence.repositories.user_repo import UserRepository

__all__ = [
    "InMemoryTaskRepository",
    "InMemoryUserRepository",
    "TaskRepository",
    "UserRepository",
]
