"""DTOs for task use cases (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date, datetime

from audit_tracker.domain.enums import (
    ObservationStatus,
    TaskFrequency,
    TaskPriority,
    TaskStatus,
)


@dataclass(frozen=True)
class TaskCreate:
    """Input for TaskAdminService.create_task."""

    name: str
    assigned_to: str
    checker1: str
    checker2: str
    due_date: date
    description: str = ""
    category: str = ""
    priority: TaskPriority = TaskPriority.MEDIUM
    frequency: TaskFrequency = TaskFrequency.ONCE
    is_recurring: bool = False
    observation_status: ObservationStatus | None = None


@dataclass(frozen=True)
class TaskUpdate:
    """Input for TaskAdminService.update_task. None leaves the field unchanged."""

    name: str | None = None
    description: str | None = None
    category: str | None = None
    priority: TaskPriority | None = None
    frequency: TaskFrequency | None = None
    is_recurring: bool | None = None
    due_date: date | None = None
    assigned_to: str | None = None
    checker1: str | None = None
    checker2: str | None = None

    def changes(self) -> dict[str, object]:
        """Fields to apply, with enum fields coerced."""
        values: dict[str, object] = {
            k: v for k, v in asdict(self).items() if v is not None
        }
        if "priority" in values:
            values["priority"] = TaskPriority(values["priority"])
        if "frequency" in values:
            values["frequency"] = TaskFrequency(values["frequency"])
        return values


@dataclass(frozen=True)
class AttachmentCreate:
    """Attachment metadata supplied by the caller; the file itself is stored elsewhere."""

    file_name: str
    file_type: str
    file_url: str


@dataclass(frozen=True)
class TaskStatusChangeEvent:
    """Emitted to the notification sink after a transition is saved."""

    task_id: str
    from_status: TaskStatus
    to_status: TaskStatus
    actor_id: str
    timestamp: datetime
