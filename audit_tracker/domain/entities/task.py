"""Task domain entity and its owned records (comments, attachments, status history).

Tasks are immutable snapshots: every change produces a new instance via
dataclasses.replace, so a failed check can never leave a half-applied task.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime

from audit_tracker.domain.enums import (
    ObservationStatus,
    TaskAction,
    TaskFrequency,
    TaskPriority,
    TaskStatus,
    UserRole,
)
from audit_tracker.domain.exceptions import ValidationException

# Task attribute holding the user assigned to each workflow role.
ASSIGNEE_FIELDS: dict[UserRole, str] = {
    UserRole.MAKER: "assigned_to",
    UserRole.CHECKER1: "checker1",
    UserRole.CHECKER2: "checker2",
}


@dataclass(frozen=True)
class TaskComment:
    """Append-only comment on a task, attributed to its author."""

    id: str
    author_id: str
    content: str
    created_at: datetime


@dataclass(frozen=True)
class TaskAttachment:
    """Attachment metadata. Binary content lives in external storage."""

    id: str
    uploaded_by: str
    file_name: str
    file_type: str
    file_url: str
    uploaded_at: datetime


@dataclass(frozen=True)
class TaskStatusChange:
    """One applied transition, recorded with the task in the same save."""

    id: str
    from_status: TaskStatus
    to_status: TaskStatus
    action: TaskAction
    actor_id: str
    changed_at: datetime
    comment_id: str | None = None


@dataclass(frozen=True)
class TaskEntity:
    """Domain entity for an audit/compliance task.

    Role assignments (assigned_to, checker1, checker2) must be pairwise
    distinct. version is the optimistic concurrency token owned by the
    repository; the engine never changes it. parent_task_id links a
    recurring instance to the first task of its series.
    """

    id: str
    name: str
    description: str
    category: str
    priority: TaskPriority
    frequency: TaskFrequency
    is_recurring: bool
    due_date: date
    assigned_to: str
    checker1: str
    checker2: str
    status: TaskStatus
    created_at: datetime
    updated_at: datetime
    observation_status: ObservationStatus | None = None
    submitted_at: datetime | None = None
    parent_task_id: str | None = None
    comments: tuple[TaskComment, ...] = ()
    attachments: tuple[TaskAttachment, ...] = ()
    history: tuple[TaskStatusChange, ...] = ()
    version: int = field(default=1)

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Validate task business rules. Raises ValidationException if invalid."""
        if not self.id:
            raise ValidationException("Task ID is required", field="id")
        if not self.name or not self.name.strip():
            raise ValidationException("Task name is required", field="name")
        for role_field in ("assigned_to", "checker1", "checker2"):
            if not getattr(self, role_field):
                raise ValidationException(
                    f"Task must have {role_field} set", field=role_field
                )
        assignees = (self.assigned_to, self.checker1, self.checker2)
        if len(set(assignees)) != len(assignees):
            raise ValidationException(
                "Maker, checker1 and checker2 must be different users",
                field="assignees",
            )
        if self.parent_task_id == self.id:
            raise ValidationException(
                "A task cannot be its own parent", field="parent_task_id"
            )
        if self.version < 1:
            raise ValidationException("Task version must be positive", field="version")

    def assignee_for(self, role: UserRole) -> str | None:
        """Return the user id holding the given workflow role on this task (None for admin)."""
        field_name = ASSIGNEE_FIELDS.get(UserRole(role))
        return getattr(self, field_name) if field_name else None

    def with_comment(self, comment: TaskComment, at: datetime) -> "TaskEntity":
        """Return a copy with the comment appended and updated_at stamped."""
        return replace(self, comments=(*self.comments, comment), updated_at=at)

    def with_attachment(self, attachment: TaskAttachment, at: datetime) -> "TaskEntity":
        """Return a copy with the attachment appended and updated_at stamped."""
        return replace(
            self, attachments=(*self.attachments, attachment), updated_at=at
        )
