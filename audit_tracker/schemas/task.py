"""Task API schemas: create/transition/comment/attachment requests and task views."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from audit_tracker.domain.enums import (
    EscalationPriority,
    ObservationStatus,
    TaskAction,
    TaskFrequency,
    TaskPriority,
    TaskStatus,
)


class TaskCreateRequest(BaseModel):
    """Request body for creating a task (admin only). Starts in pending."""

    name: str = Field(..., min_length=1, max_length=500)
    description: str = Field(default="", max_length=10000)
    category: str = Field(default="", max_length=200)
    priority: TaskPriority = TaskPriority.MEDIUM
    frequency: TaskFrequency = TaskFrequency.ONCE
    is_recurring: bool = False
    due_date: date
    assigned_to: str = Field(..., min_length=1, description="Maker user id")
    checker1: str = Field(..., min_length=1, description="First checker user id")
    checker2: str = Field(..., min_length=1, description="Second checker user id")
    observation_status: ObservationStatus | None = None


class TaskUpdateRequest(BaseModel):
    """Request body for PUT /tasks/{id} (admin only). Omitted fields stay unchanged; status cannot be set here."""

    name: str | None = Field(default=None, min_length=1, max_length=500)
    description: str | None = Field(default=None, max_length=10000)
    category: str | None = Field(default=None, max_length=200)
    priority: TaskPriority | None = None
    frequency: TaskFrequency | None = None
    is_recurring: bool | None = None
    due_date: date | None = None
    assigned_to: str | None = Field(default=None, min_length=1)
    checker1: str | None = Field(default=None, min_length=1)
    checker2: str | None = Field(default=None, min_length=1)
    expected_version: int | None = Field(default=None, ge=1)


class TransitionRequest(BaseModel):
    """Request body for POST /tasks/{id}/transitions."""

    action: TaskAction
    comment: str | None = Field(default=None, max_length=10000)
    expected_version: int | None = Field(
        default=None,
        ge=1,
        description="Version the caller last saw; 409 when the task has changed since",
    )


class ObservationStatusRequest(BaseModel):
    """Request body for PUT /tasks/{id}/observation-status."""

    observation_status: ObservationStatus
    expected_version: int | None = Field(default=None, ge=1)


class CommentCreateRequest(BaseModel):
    """Request body for POST /tasks/{id}/comments."""

    content: str = Field(..., min_length=1, max_length=10000)


class AttachmentCreateRequest(BaseModel):
    """Attachment metadata; the file itself is uploaded elsewhere."""

    file_name: str = Field(..., min_length=1, max_length=500)
    file_type: str = Field(default="application/octet-stream", max_length=200)
    file_url: str = Field(..., min_length=1)


class TaskCommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    author_id: str
    content: str
    created_at: datetime


class TaskAttachmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    uploaded_by: str
    file_name: str
    file_type: str
    file_url: str
    uploaded_at: datetime


class TaskStatusChangeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    from_status: TaskStatus
    to_status: TaskStatus
    action: TaskAction
    actor_id: str
    changed_at: datetime
    comment_id: str | None = None


class TaskResponse(BaseModel):
    """Task view. is_overdue is derived at read time; available_actions is per caller."""

    model_config = ConfigDict(from_attributes=True)

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
    observation_status: ObservationStatus | None = None
    submitted_at: datetime | None = None
    parent_task_id: str | None = None
    created_at: datetime
    updated_at: datetime
    version: int
    is_overdue: bool = False
    available_actions: list[TaskAction] = Field(default_factory=list)
    comments: list[TaskCommentResponse] = Field(default_factory=list)
    attachments: list[TaskAttachmentResponse] = Field(default_factory=list)
    history: list[TaskStatusChangeResponse] = Field(default_factory=list)


class EscalationResponse(BaseModel):
    """One escalated task (rejected or overdue)."""

    task: TaskResponse
    reason: str
    priority: EscalationPriority
    days_overdue: int
