"""Task workflow engine: role-scoped visibility and atomic status transitions.

Holds no state between calls. Each mutation loads one task snapshot, checks
visibility first, computes the new snapshot with the pure functions in
audit_tracker.domain.workflow and saves it with the snapshot's version. Only
after a successful save is the status-change event handed to the sink.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from audit_tracker.application.dtos.task import AttachmentCreate, TaskStatusChangeEvent
from audit_tracker.application.interfaces.repositories import ITaskRepository
from audit_tracker.application.interfaces.services import INotificationSink
from audit_tracker.domain.entities import (
    TaskAttachment,
    TaskComment,
    TaskEntity,
    UserEntity,
)
from audit_tracker.domain.enums import ObservationStatus, TaskAction, TaskStatus, UserRole
from audit_tracker.domain.escalation import Escalation, derive_escalation
from audit_tracker.domain.exceptions import (
    AuthorizationException,
    InvalidTransitionException,
    ResourceNotFoundException,
    ValidationException,
)
from audit_tracker.domain.recurrence import series_id
from audit_tracker.domain.workflow import (
    MAKER_EDITABLE_STATUSES,
    can_view,
    is_actor_for,
    transition_task,
    visibility_predicate,
)
from audit_tracker.shared.telemetry.logging import get_logger
from audit_tracker.shared.utils.datetime import utc_now
from audit_tracker.shared.utils.generators import generate_cuid

logger = get_logger(__name__)


class TaskWorkflowEngine:
    """Lists the tasks a user may see and applies workflow actions to them."""

    def __init__(
        self,
        task_repo: ITaskRepository,
        notification_sink: INotificationSink | None = None,
        *,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = generate_cuid,
    ) -> None:
        self.task_repo = task_repo
        self._notification_sink = notification_sink
        self._clock = clock
        self._id_factory = id_factory

    async def list_visible_tasks(
        self, user: UserEntity, status: TaskStatus | None = None
    ) -> list[TaskEntity]:
        """Return the tasks the user may see, optionally narrowed to one status."""
        return await self.task_repo.query(visibility_predicate(user, status))

    async def get_visible_task(self, user: UserEntity, task_id: str) -> TaskEntity:
        """Return the task if it exists and the user may see it.

        Raises:
            ResourceNotFoundException: Unknown id, or a task outside the user's
                assignments (its existence is not revealed).
        """
        task = await self.task_repo.get_by_id(task_id)
        if task is None or not can_view(user, task):
            raise ResourceNotFoundException("task", task_id)
        return task

    async def list_task_instances(self, user: UserEntity, task_id: str) -> list[TaskEntity]:
        """Return the rolled-over instances of the recurring series the task belongs to.

        Only instances the user may see are returned, ordered by due date.
        """
        task = await self.get_visible_task(user, task_id)
        return await self.task_repo.query(
            replace(visibility_predicate(user), parent_task_id=series_id(task))
        )

    async def apply_transition(
        self,
        user: UserEntity,
        task_id: str,
        action: TaskAction,
        comment: str | None = None,
        *,
        expected_version: int | None = None,
    ) -> TaskEntity:
        """Apply a workflow action and return the saved task.

        Args:
            user: Acting user.
            task_id: Task to transition.
            action: Requested action (start, submit, checker1-approve, ...).
            comment: Optional comment appended in the same save.
            expected_version: Version of the caller's snapshot; defaults to the
                version just loaded.

        Raises:
            ResourceNotFoundException: Unknown or invisible task.
            InvalidTransitionException: No such edge, or wrong actor.
            ValidationException: Submit without observation status.
            ConcurrentModificationException: Snapshot is stale.
        """
        task = await self.get_visible_task(user, task_id)
        try:
            requested = TaskAction(action)
        except ValueError:
            raise InvalidTransitionException(
                task.id, task.status.value, str(action), user.role.value, "no_edge"
            ) from None
        now = self._clock()
        try:
            updated = transition_task(
                task, user, requested, now, comment, id_factory=self._id_factory
            )
        except (InvalidTransitionException, ValidationException) as e:
            logger.warning(
                "Rejected %s on task %s by user %s (%s): %s",
                requested.value,
                task_id,
                user.id,
                user.role.value,
                e.error_code,
            )
            raise

        saved = await self._save(updated, task, expected_version)
        logger.info(
            "Task %s %s -> %s by user %s",
            task_id,
            task.status.value,
            saved.status.value,
            user.id,
        )
        await self._notify(
            TaskStatusChangeEvent(
                task_id=saved.id,
                from_status=task.status,
                to_status=saved.status,
                actor_id=user.id,
                timestamp=now,
            )
        )
        return saved

    async def set_observation_status(
        self,
        user: UserEntity,
        task_id: str,
        observation_status: ObservationStatus,
        *,
        expected_version: int | None = None,
    ) -> TaskEntity:
        """Set the observation status; only the assigned maker, only while the maker owns the task."""
        task = await self.get_visible_task(user, task_id)
        if not is_actor_for(user, task, UserRole.MAKER):
            raise InvalidTransitionException(
                task.id, task.status.value, "set-observation-status", user.role.value, "wrong_role"
            )
        if task.status not in MAKER_EDITABLE_STATUSES:
            raise InvalidTransitionException(
                task.id, task.status.value, "set-observation-status", user.role.value, "no_edge"
            )
        updated = replace(
            task,
            observation_status=ObservationStatus(observation_status),
            updated_at=self._clock(),
        )
        return await self._save(updated, task, expected_version)

    async def add_comment(
        self,
        user: UserEntity,
        task_id: str,
        content: str,
        *,
        expected_version: int | None = None,
    ) -> TaskEntity:
        """Append a comment from anyone who can see the task."""
        text = (content or "").strip()
        if not text:
            raise ValidationException("Comment content is required", field="content")
        task = await self.get_visible_task(user, task_id)
        now = self._clock()
        comment = TaskComment(
            id=self._id_factory(), author_id=user.id, content=text, created_at=now
        )
        return await self._save(task.with_comment(comment, now), task, expected_version)

    async def add_attachment(
        self,
        user: UserEntity,
        task_id: str,
        data: AttachmentCreate,
        *,
        expected_version: int | None = None,
    ) -> TaskEntity:
        """Record attachment metadata. Allowed for the assigned maker and admins."""
        if not data.file_name.strip():
            raise ValidationException("Attachment file name is required", field="file_name")
        if not data.file_url.strip():
            raise ValidationException("Attachment URL is required", field="file_url")
        task = await self.get_visible_task(user, task_id)
        if not (user.is_admin or is_actor_for(user, task, UserRole.MAKER)):
            raise AuthorizationException(resource="task_attachment", action="create")
        now = self._clock()
        attachment = TaskAttachment(
            id=self._id_factory(),
            uploaded_by=user.id,
            file_name=data.file_name.strip(),
            file_type=data.file_type,
            file_url=data.file_url.strip(),
            uploaded_at=now,
        )
        return await self._save(
            task.with_attachment(attachment, now), task, expected_version
        )

    async def list_escalations(
        self, user: UserEntity, now: datetime | None = None
    ) -> list[Escalation]:
        """Return escalations (rejected or overdue) among the user's visible tasks, most urgent first."""
        at = now or self._clock()
        escalations = [
            e
            for e in (derive_escalation(t, at) for t in await self.list_visible_tasks(user))
            if e is not None
        ]
        escalations.sort(key=lambda e: (-e.priority.rank, -e.days_overdue, e.task.id))
        return escalations

    async def _save(
        self,
        updated: TaskEntity,
        loaded: TaskEntity,
        expected_version: int | None,
    ) -> TaskEntity:
        version = loaded.version if expected_version is None else expected_version
        return await self.task_repo.save(updated, expected_version=version)

    async def _notify(self, event: TaskStatusChangeEvent) -> None:
        """Hand the event to the sink. The transition is already saved, so failures are only logged."""
        if self._notification_sink is None:
            return
        try:
            await self._notification_sink.publish(event)
        except Exception:
            logger.exception(
                "Notification sink failed for task %s (%s -> %s)",
                event.task_id,
                event.from_status.value,
                event.to_status.value,
            )
