"""Overdue and escalation projections (read-only, never stored).

A task is overdue while the maker still owns it (pending or in-progress)
and its due date has passed. Escalated tasks are the overdue ones plus the
rejected ones; priority grows with the number of days overdue.
"""

import math
from dataclasses import dataclass
from datetime import datetime

from audit_tracker.domain.entities.task import TaskEntity
from audit_tracker.domain.enums import EscalationPriority, TaskStatus
from audit_tracker.shared.utils.datetime import ensure_utc, start_of_day_utc

OVERDUE_STATUSES: frozenset[TaskStatus] = frozenset(
    {TaskStatus.PENDING, TaskStatus.IN_PROGRESS}
)

# (days overdue strictly greater than, priority), checked top-down.
_OVERDUE_PRIORITY_BANDS: tuple[tuple[int, EscalationPriority], ...] = (
    (14, EscalationPriority.CRITICAL),
    (7, EscalationPriority.HIGH),
    (3, EscalationPriority.MEDIUM),
)

REJECTED_REASON = "Task was rejected"
OVERDUE_REASON = "Task is overdue"


@dataclass(frozen=True)
class Escalation:
    """Why a task needs attention and how urgently."""

    task: TaskEntity
    reason: str
    priority: EscalationPriority
    days_overdue: int


def days_overdue(task: TaskEntity, now: datetime) -> int:
    """Whole days elapsed since the due date; 0 when not yet due."""
    elapsed = ensure_utc(now) - start_of_day_utc(task.due_date)
    return max(0, math.floor(elapsed.total_seconds() / 86400))


def is_overdue(task: TaskEntity, now: datetime) -> bool:
    """Return whether the due date has passed while the task is pending or in progress."""
    if task.status not in OVERDUE_STATUSES:
        return False
    return start_of_day_utc(task.due_date) < ensure_utc(now)


def overdue_priority(days: int) -> EscalationPriority:
    """Map days overdue to an escalation priority."""
    for threshold, priority in _OVERDUE_PRIORITY_BANDS:
        if days > threshold:
            return priority
    return EscalationPriority.LOW


def derive_escalation(task: TaskEntity, now: datetime) -> Escalation | None:
    """Return the escalation view of the task, or None when it needs no escalation."""
    if task.status == TaskStatus.REJECTED:
        return Escalation(
            task=task,
            reason=REJECTED_REASON,
            priority=EscalationPriority.HIGH,
            days_overdue=days_overdue(task, now),
        )
    if is_overdue(task, now):
        days = days_overdue(task, now)
        return Escalation(
            task=task,
            reason=OVERDUE_REASON,
            priority=overdue_priority(days),
            days_overdue=days,
        )
    return None
