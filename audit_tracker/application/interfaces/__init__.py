"""Ports implemented by infrastructure (repositories, notification sinks)."""

from audit_tracker.application.interfaces.repositories import (
    ITaskRepository,
    IUserRepository,
    TaskPredicate,
)
from audit_tracker.application.interfaces.services import INotificationSink

__all__ = [
    "INotificationSink",
    "ITaskRepository",
    "IUserRepository",
    "TaskPredicate",
]
