"""Task administration: admins create, edit and roll over tasks.

Each assignee must hold the slot's role as primary role, the role the
workflow uses for visibility and transitions.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from typing import Protocol

from audit_tracker.application.dtos.task import TaskCreate, TaskUpdate
from audit_tracker.application.interfaces.repositories import (
    ITaskRepository,
    IUserRepository,
)
from audit_tracker.domain.entities import TaskEntity, UserEntity
from audit_tracker.domain.enums import (
    ObservationStatus,
    TaskFrequency,
    TaskPriority,
    TaskStatus,
    UserRole,
)
from audit_tracker.domain.exceptions import (
    AuthorizationException,
    InvalidTransitionException,
    ResourceNotFoundException,
    ValidationException,
)
from audit_tracker.domain.recurrence import can_roll_over, next_due_date, series_id
from audit_tracker.domain.workflow import TaskFilter
from audit_tracker.shared.telemetry.logging import get_logger
from audit_tracker.shared.utils.datetime import utc_now
from audit_tracker.shared.utils.generators import generate_cuid

logger = get_logger(__name__)

_ASSIGNEE_ROLES: tuple[tuple[str, UserRole], ...] = (
    ("assigned_to", UserRole.MAKER),
    ("checker1", UserRole.CHECKER1),
    ("checker2", UserRole.CHECKER2),
)


class _Assignees(Protocol):
    assigned_to: str
    checker1: str
    checker2: str


class TaskAdminService:
    """Creates, edits and rolls over tasks. When a user repository is given, assignees are checked against it."""

    def __init__(
        self,
        task_repo: ITaskRepository,
        user_repo: IUserRepository | None = None,
        *,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = generate_cuid,
    ) -> None:
        self.task_repo = task_repo
        self.user_repo = user_repo
        self._clock = clock
        self._id_factory = id_factory

    async def create_task(self, actor: UserEntity, data: TaskCreate) -> TaskEntity:
        """Create a pending task. Only admins may create tasks.

        Raises:
            AuthorizationException: Actor is not an admin.
            ValidationException: Missing name, repeated assignee, or an assignee
                that does not exist, is inactive or has another primary role.
        """
        if not actor.is_admin:
            raise AuthorizationException(resource="task", action="create")
        await self._validate_assignees(data)

        now = self._clock()
        task = TaskEntity(
            id=self._id_factory(),
            name=data.name.strip(),
            description=data.description,
            category=data.category,
            priority=TaskPriority(data.priority),
            frequency=TaskFrequency(data.frequency),
            is_recurring=data.is_recurring,
            due_date=data.due_date,
            assigned_to=data.assigned_to,
            checker1=data.checker1,
            checker2=data.checker2,
            status=TaskStatus.PENDING,
            created_at=now,
            updated_at=now,
            observation_status=(
                ObservationStatus(data.observation_status)
                if data.observation_status is not None
                else None
            ),
        )
        created = await self.task_repo.add(task)
        logger.info("Task %s created by admin %s", created.id, actor.id)
        return created

    async def update_task(
        self,
        actor: UserEntity,
        task_id: str,
        data: TaskUpdate,
        *,
        expected_version: int | None = None,
    ) -> TaskEntity:
        """Edit details, due date or assignees of a task. Status is never changed here.

        Raises:
            AuthorizationException: Actor is not an admin.
            ResourceNotFoundException: Unknown task.
            ValidationException: Blank name, repeated assignee, or an invalid assignee.
            ConcurrentModificationException: The task changed since expected_version.
        """
        if not actor.is_admin:
            raise AuthorizationException(resource="task", action="update")
        task = await self._get_task(task_id)
        changes = data.changes()
        if not changes:
            return task
        if "name" in changes:
            changes["name"] = str(changes["name"]).strip()

        updated = replace(task, **changes, updated_at=self._clock())
        if any(field_name in changes for field_name, _ in _ASSIGNEE_ROLES):
            await self._validate_assignees(updated)

        version = task.version if expected_version is None else expected_version
        saved = await self.task_repo.save(updated, expected_version=version)
        logger.info(
            "Task %s updated by admin %s (%s)",
            task_id,
            actor.id,
            ", ".join(sorted(changes)),
        )
        return saved

    async def rollover_recurring_task(self, actor: UserEntity, task_id: str) -> TaskEntity:
        """Create the next pending instance of an approved recurring task.

        The instance copies details and assignees, is due one period after the
        task, and belongs to the same series.

        Raises:
            AuthorizationException: Actor is not an admin.
            ResourceNotFoundException: Unknown task.
            ValidationException: Task does not recur, the next instance already
                exists, or an assignee is no longer valid.
            InvalidTransitionException: Task is not approved yet.
        """
        if not actor.is_admin:
            raise AuthorizationException(resource="task", action="rollover")
        task = await self._get_task(task_id)
        if not can_roll_over(task):
            raise ValidationException(
                f"Task {task_id} is not a recurring task", field="is_recurring"
            )
        if task.status != TaskStatus.APPROVED:
            raise InvalidTransitionException(
                task.id, task.status.value, "rollover", actor.role.value, "not_approved"
            )

        due_date = next_due_date(task.due_date, task.frequency)
        parent_id = series_id(task)
        series = await self.task_repo.query(TaskFilter(parent_task_id=parent_id))
        if any(t.due_date == due_date for t in series):
            raise ValidationException(
                f"Recurring task {parent_id} already has an instance due {due_date}",
                field="due_date",
            )
        await self._validate_assignees(task)

        now = self._clock()
        instance = TaskEntity(
            id=self._id_factory(),
            name=task.name,
            description=task.description,
            category=task.category,
            priority=task.priority,
            frequency=task.frequency,
            is_recurring=True,
            due_date=due_date,
            assigned_to=task.assigned_to,
            checker1=task.checker1,
            checker2=task.checker2,
            status=TaskStatus.PENDING,
            created_at=now,
            updated_at=now,
            parent_task_id=parent_id,
        )
        created = await self.task_repo.add(instance)
        logger.info(
            "Task %s rolled over to %s (due %s) by admin %s",
            task_id,
            created.id,
            due_date.isoformat(),
            actor.id,
        )
        return created

    async def _get_task(self, task_id: str) -> TaskEntity:
        task = await self.task_repo.get_by_id(task_id)
        if task is None:
            raise ResourceNotFoundException("task", task_id)
        return task

    async def _validate_assignees(self, assignees: _Assignees) -> None:
        if self.user_repo is None:
            return
        for field_name, role in _ASSIGNEE_ROLES:
            user_id = getattr(assignees, field_name)
            user = await self.user_repo.get_by_id(user_id) if user_id else None
            if user is None or not user.is_active:
                raise ValidationException(
                    f"Unknown or inactive user for {field_name}: {user_id}",
                    field=field_name,
                )
            if user.role != role:
                raise ValidationException(
                    f"User {user_id} must have {role.value} as primary role "
                    f"(has {user.role.value})",
                    field=field_name,
                )
