"""Application services: workflow engine, task administration, users."""

from audit_tracker.application.services.task_admin_service import TaskAdminService
from audit_tracker.application.services.task_workflow_engine import TaskWorkflowEngine
from audit_tracker.application.services.user_service import UserService

__all__ = [
    "TaskAdminService",
    "TaskWorkflowEngine",
    "UserService",
]
