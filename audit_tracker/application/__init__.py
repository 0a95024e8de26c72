"""Application layer: interfaces, DTOs and services.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (task/user repositories, notification sinks).
"""

from audit_tracker.application.interfaces import (
    INotificationSink,
    ITaskRepository,
    IUserRepository,
)
from audit_tracker.application.services import (
    TaskAdminService,
    TaskWorkflowEngine,
    UserService,
)

__all__ = [
    "INotificationSink",
    "ITaskRepository",
    "IUserRepository",
    "TaskAdminService",
    "TaskWorkflowEngine",
    "UserService",
]
