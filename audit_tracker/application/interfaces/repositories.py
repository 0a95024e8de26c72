"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference domain entities only; no infrastructure imports.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from audit_tracker.domain.entities import TaskEntity, UserEntity

TaskPredicate = Callable[["TaskEntity"], bool]


# Task repository interface
class ITaskRepository(Protocol):
    """Protocol for task persistence with optimistic concurrency."""

    async def get_by_id(self, task_id: str) -> TaskEntity | None:
        """Return the current snapshot of the task, or None."""

    async def query(self, predicate: TaskPredicate) -> list[TaskEntity]:
        """Return all tasks matching predicate (ordered by due date, then id)."""

    async def add(self, task: TaskEntity) -> TaskEntity:
        """Persist a new task (version 1) and return it."""

    async def save(self, task: TaskEntity, expected_version: int) -> TaskEntity:
        """Persist task if the stored version equals expected_version; return it with version + 1.

        Raises ConcurrentModificationException on version mismatch and
        ResourceNotFoundException when the task no longer exists.
        """


# User repository interface
class IUserRepository(Protocol):
    """Protocol for user lookup and creation."""

    async def get_by_id(self, user_id: str) -> UserEntity | None:
        """Return user by ID."""

    async def get_by_email(self, email: str) -> UserEntity | None:
        """Return user by email (case-insensitive)."""

    async def add(self, user: UserEntity) -> UserEntity:
        """Persist a new user and return it."""

    async def list_all(self) -> list[UserEntity]:
        """Return all users ordered by name."""
