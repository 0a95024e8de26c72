"""In-memory repositories (database_backend='memory' and tests).

Same contract as the SQL repositories: snapshots are immutable entities, and
save() enforces the expected version under a lock so concurrent writers to
one task are serialized.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace

from audit_tracker.application.interfaces.repositories import TaskPredicate
from audit_tracker.domain.entities import TaskEntity, UserEntity
from audit_tracker.domain.exceptions import (
    ConcurrentModificationException,
    ResourceNotFoundException,
    ValidationException,
)


class InMemoryTaskRepository:
    """Task store keyed by id. Implements ITaskRepository."""

    def __init__(self, tasks: list[TaskEntity] | None = None) -> None:
        self._tasks: dict[str, TaskEntity] = {}
        self._lock = asyncio.Lock()
        for task in tasks or []:
            self._tasks[task.id] = task

    async def get_by_id(self, task_id: str) -> TaskEntity | None:
        return self._tasks.get(task_id)

    async def query(self, predicate: TaskPredicate) -> list[TaskEntity]:
        matches = [t for t in self._tasks.values() if predicate(t)]
        return sorted(matches, key=lambda t: (t.due_date, t.id))

    async def add(self, task: TaskEntity) -> TaskEntity:
        async with self._lock:
            if task.id in self._tasks:
                raise ValidationException(f"Task {task.id} already exists", field="id")
            stored = task if task.version == 1 else replace(task, version=1)
            self._tasks[task.id] = stored
            return stored

    async def save(self, task: TaskEntity, expected_version: int) -> TaskEntity:
        async with self._lock:
            current = self._tasks.get(task.id)
            if current is None:
                raise ResourceNotFoundException("task", task.id)
            if current.version != expected_version:
                raise ConcurrentModificationException(
                    task.id, expected_version, current.version
                )
            stored = replace(task, version=expected_version + 1)
            self._tasks[task.id] = stored
            return stored


class InMemoryUserRepository:
    """User store keyed by id with case-insensitive email lookup. Implements IUserRepository."""

    def __init__(self, users: list[UserEntity] | None = None) -> None:
        self._users: dict[str, UserEntity] = {}
        for user in users or []:
            self._users[user.id] = user

    async def get_by_id(self, user_id: str) -> UserEntity | None:
        return self._users.get(user_id)

    async def get_by_email(self, email: str) -> UserEntity | None:
        wanted = email.lower()
        return next(
            (u for u in self._users.values() if u.email.lower() == wanted), None
        )

    async def add(self, user: UserEntity) -> UserEntity:
        if await self.get_by_email(user.email) is not None:
            raise ValidationException(
                "A user with this email already exists", field="email"
            )
        self._users[user.id] = user
        return user

    async def list_all(self) -> list[UserEntity]:
        return sorted(self._users.values(), key=lambda u: (u.name, u.id))
