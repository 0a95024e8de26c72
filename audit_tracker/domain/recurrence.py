"""Recurring tasks: next due date by frequency and the series a task belongs to.

A recurring task rolls over into a new pending instance whose due date is one
period after the current one. Every instance points at the first task of the
series (parent_task_id), so the series can be listed from any of its tasks.
"""

import calendar
from datetime import date, timedelta

from audit_tracker.domain.entities.task import TaskEntity
from audit_tracker.domain.enums import TaskFrequency

_DAYS: dict[TaskFrequency, int] = {
    TaskFrequency.DAILY: 1,
    TaskFrequency.WEEKLY: 7,
    TaskFrequency.BI_WEEKLY: 14,
}

_MONTHS: dict[TaskFrequency, int] = {
    TaskFrequency.MONTHLY: 1,
    TaskFrequency.QUARTERLY: 3,
    TaskFrequency.YEARLY: 12,
}


def add_months(day: date, months: int) -> date:
    """Return the same day months later, clamped to the end of a shorter month."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def next_due_date(due_date: date, frequency: TaskFrequency) -> date | None:
    """Return the due date of the next instance, or None for one-time tasks."""
    frequency = TaskFrequency(frequency)
    if frequency in _DAYS:
        return due_date + timedelta(days=_DAYS[frequency])
    if frequency in _MONTHS:
        return add_months(due_date, _MONTHS[frequency])
    return None


def series_id(task: TaskEntity) -> str:
    """Id of the first task in the recurring series the task belongs to."""
    return task.parent_task_id or task.id


def can_roll_over(task: TaskEntity) -> bool:
    """Return whether the task repeats (recurring flag set and a real frequency)."""
    return task.is_recurring and next_due_date(task.due_date, task.frequency) is not None
