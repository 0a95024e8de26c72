"""Task repository (SQLAlchemy). Implements ITaskRepository with optimistic versioning.

save() issues UPDATE ... WHERE id = :id AND version = :expected; zero rows
updated means another writer got there first (or the task is gone). New
comments, attachments and history rows are inserted in the same transaction.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace

from sqlalchemy import Select, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from audit_tracker.application.interfaces.repositories import TaskPredicate
from audit_tracker.domain.entities import (
    TaskAttachment,
    TaskComment,
    TaskEntity,
    TaskStatusChange,
)
from audit_tracker.domain.enums import (
    ObservationStatus,
    TaskAction,
    TaskFrequency,
    TaskPriority,
    TaskStatus,
)
from audit_tracker.domain.exceptions import (
    ConcurrentModificationException,
    ResourceNotFoundException,
)
from audit_tracker.domain.workflow import TaskFilter
from audit_tracker.infrastructure.persistence.models import task as orm
from audit_tracker.shared.utils.datetime import ensure_utc


def _to_entity(t: orm.Task) -> TaskEntity:
    """Map Task ORM (with children loaded) to the domain entity."""
    return TaskEntity(
        id=t.id,
        name=t.name,
        description=t.description,
        category=t.category,
        priority=TaskPriority(t.priority),
        frequency=TaskFrequency(t.frequency),
        is_recurring=t.is_recurring,
        due_date=t.due_date,
        assigned_to=t.assigned_to,
        checker1=t.checker1,
        checker2=t.checker2,
        status=TaskStatus(t.status),
        created_at=ensure_utc(t.created_at),
        updated_at=ensure_utc(t.updated_at),
        observation_status=(
            ObservationStatus(t.observation_status) if t.observation_status else None
        ),
        submitted_at=ensure_utc(t.submitted_at),
        parent_task_id=t.parent_task_id,
        comments=tuple(
            TaskComment(
                id=c.id,
                author_id=c.author_id,
                content=c.content,
                created_at=ensure_utc(c.created_at),
            )
            for c in t.comments
        ),
        attachments=tuple(
            TaskAttachment(
                id=a.id,
                uploaded_by=a.uploaded_by,
                file_name=a.file_name,
                file_type=a.file_type,
                file_url=a.file_url,
                uploaded_at=ensure_utc(a.uploaded_at),
            )
            for a in t.attachments
        ),
        history=tuple(
            TaskStatusChange(
                id=h.id,
                from_status=TaskStatus(h.from_status),
                to_status=TaskStatus(h.to_status),
                action=TaskAction(h.action),
                actor_id=h.actor_id,
                changed_at=ensure_utc(h.changed_at),
                comment_id=h.comment_id,
            )
            for h in t.history
        ),
        version=t.version,
    )


def _scalar_values(task: TaskEntity) -> dict[str, object]:
    """Column values of the task row (children excluded)."""
    return {
        "name": task.name,
        "description": task.description,
        "category": task.category,
        "priority": task.priority.value,
        "frequency": task.frequency.value,
        "is_recurring": task.is_recurring,
        "due_date": task.due_date,
        "assigned_to": task.assigned_to,
        "checker1": task.checker1,
        "checker2": task.checker2,
        "status": task.status.value,
        "observation_status": (
            task.observation_status.value if task.observation_status else None
        ),
        "submitted_at": task.submitted_at,
        "parent_task_id": task.parent_task_id,
        "created_at": task.created_at,
        "updated_at": task.updated_at,
    }


def _comment_rows(task_id: str, comments: Iterable[TaskComment]) -> list[orm.TaskComment]:
    return [
        orm.TaskComment(
            id=c.id,
            task_id=task_id,
            author_id=c.author_id,
            content=c.content,
            created_at=c.created_at,
        )
        for c in comments
    ]


def _attachment_rows(
    task_id: str, attachments: Iterable[TaskAttachment]
) -> list[orm.TaskAttachment]:
    return [
        orm.TaskAttachment(
            id=a.id,
            task_id=task_id,
            uploaded_by=a.uploaded_by,
            file_name=a.file_name,
            file_type=a.file_type,
            file_url=a.file_url,
            uploaded_at=a.uploaded_at,
        )
        for a in attachments
    ]


def _history_rows(
    task_id: str, history: Iterable[TaskStatusChange]
) -> list[orm.TaskStatusChange]:
    return [
        orm.TaskStatusChange(
            id=h.id,
            task_id=task_id,
            from_status=h.from_status.value,
            to_status=h.to_status.value,
            action=h.action.value,
            actor_id=h.actor_id,
            comment_id=h.comment_id,
            changed_at=h.changed_at,
        )
        for h in history
    ]


class TaskRepository:
    """Task repository. Implements ITaskRepository."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    def _select(self) -> Select[tuple[orm.Task]]:
        # populate_existing: rows updated through save() must not come back stale.
        return (
            select(orm.Task)
            .options(
                selectinload(orm.Task.comments),
                selectinload(orm.Task.attachments),
                selectinload(orm.Task.history),
            )
            .execution_options(populate_existing=True)
        )

    async def get_by_id(self, task_id: str) -> TaskEntity | None:
        result = await self.db.execute(
            self._select().where(orm.Task.id == task_id)
        )
        row = result.scalar_one_or_none()
        return _to_entity(row) if row else None

    async def query(self, predicate: TaskPredicate) -> list[TaskEntity]:
        """Return matching tasks ordered by due date.

        A TaskFilter is translated into SQL; any other callable is applied
        in Python after loading all tasks.
        """
        stmt = self._select().order_by(orm.Task.due_date, orm.Task.id)
        if isinstance(predicate, TaskFilter):
            if predicate.assignee_field is not None:
                stmt = stmt.where(
                    getattr(orm.Task, predicate.assignee_field) == predicate.user_id
                )
            if predicate.status is not None:
                stmt = stmt.where(orm.Task.status == predicate.status.value)
            if predicate.parent_task_id is not None:
                stmt = stmt.where(orm.Task.parent_task_id == predicate.parent_task_id)
            result = await self.db.execute(stmt)
            return [_to_entity(t) for t in result.scalars().all()]
        result = await self.db.execute(stmt)
        return [e for e in (_to_entity(t) for t in result.scalars().all()) if predicate(e)]

    async def add(self, task: TaskEntity) -> TaskEntity:
        row = orm.Task(id=task.id, version=1, **_scalar_values(task))
        self.db.add(row)
        await self.db.flush()
        await self._insert_children(task, known_ids=set())
        return task if task.version == 1 else replace(task, version=1)

    async def save(self, task: TaskEntity, expected_version: int) -> TaskEntity:
        result = await self.db.execute(
            update(orm.Task)
            .where(orm.Task.id == task.id, orm.Task.version == expected_version)
            .values(version=orm.Task.version + 1, **_scalar_values(task))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            current = await self.db.scalar(
                select(orm.Task.version).where(orm.Task.id == task.id)
            )
            if current is None:
                raise ResourceNotFoundException("task", task.id)
            raise ConcurrentModificationException(task.id, expected_version, current)
        await self._insert_children(task, known_ids=await self._child_ids(task.id))
        return replace(task, version=expected_version + 1)

    async def _child_ids(self, task_id: str) -> set[str]:
        ids: set[str] = set()
        for model in (orm.TaskComment, orm.TaskAttachment, orm.TaskStatusChange):
            result = await self.db.execute(select(model.id).where(model.task_id == task_id))
            ids.update(result.scalars().all())
        return ids

    async def _insert_children(self, task: TaskEntity, known_ids: set[str]) -> None:
        """Insert comments/attachments/history not yet stored (all three are append-only)."""
        comments = [c for c in task.comments if c.id not in known_ids]
        attachments = [a for a in task.attachments if a.id not in known_ids]
        history = [h for h in task.history if h.id not in known_ids]
        # Comments first: history rows reference them.
        self.db.add_all(_comment_rows(task.id, comments))
        self.db.add_all(_attachment_rows(task.id, attachments))
        await self.db.flush()
        self.db.add_all(_history_rows(task.id, history))
        await self.db.flush()
