"""Domain exceptions for the Audit Tracker application.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class AuditTrackerException(Exception):
    """Base exception for all Audit Tracker application errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, task_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON error body used by the HTTP exception handler."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(AuditTrackerException):
    """Raised when input validation fails (e.g. missing observation status before submit)."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        **details_extra: Any,
    ) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
            **details_extra: Optional keys merged into details (e.g. task_id).
        """
        details: dict[str, Any] = {"field": field} if field else {}
        details.update(details_extra)
        super().__init__(message, "VALIDATION_ERROR", details)


class InvalidTransitionException(AuditTrackerException):
    """Raised when the action is not permitted for the task's status or the actor's role."""

    def __init__(
        self,
        task_id: str,
        status: str,
        action: str,
        actor_role: str,
        reason: str,
    ) -> None:
        """Initialize with the rejected transition context.

        Args:
            task_id: Task the action was attempted on.
            status: Current task status.
            action: Requested action.
            actor_role: Primary role of the acting user.
            reason: Short machine-readable reason (e.g. 'no_edge', 'wrong_role').
        """
        super().__init__(
            f"Cannot {action} task in status '{status}' as {actor_role}",
            "INVALID_TRANSITION",
            {
                "task_id": task_id,
                "status": status,
                "action": action,
                "actor_role": actor_role,
                "reason": reason,
            },
        )


class ResourceNotFoundException(AuditTrackerException):
    """Raised when a requested resource is not found (or not visible to the caller)."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'task', 'user').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class ConcurrentModificationException(AuditTrackerException):
    """Raised when a save lost the optimistic version check; refetch and retry."""

    def __init__(
        self,
        task_id: str,
        expected_version: int,
        current_version: int | None = None,
    ) -> None:
        details: dict[str, Any] = {
            "task_id": task_id,
            "expected_version": expected_version,
        }
        if current_version is not None:
            details["current_version"] = current_version
        super().__init__(
            "Task was modified by another request; refetch and retry.",
            "CONCURRENT_MODIFICATION",
            details,
        )


class AuthenticationException(AuditTrackerException):
    """Raised when authentication fails (e.g. invalid or expired token)."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(AuditTrackerException):
    """Raised when the user lacks the role required for the operation."""

    def __init__(
        self,
        resource: str | None = None,
        action: str | None = None,
        message: str = "Permission denied",
    ) -> None:
        """Initialize with optional resource, action, and message.

        Args:
            resource: Optional resource type (e.g. 'task', 'user').
            action: Optional action that was attempted (e.g. 'create').
            message: Human-readable message; default used when resource/action omitted.
        """
        if resource and action:
            message = f"Permission denied: {action} on {resource}"
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if action:
            details["action"] = action
        super().__init__(message, "PERMISSION_DENIED", details)


# Names used by callers that think in terms of the workflow's error taxonomy.
ValidationError = ValidationException
InvalidTransitionError = InvalidTransitionException
NotFoundError = ResourceNotFoundException
ConcurrentModificationError = ConcurrentModificationException
