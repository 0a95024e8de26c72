"""Domain layer: entities, enums, exceptions, workflow rules and escalation.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from audit_tracker.domain.entities import (
    TaskAttachment,
    TaskComment,
    TaskEntity,
    TaskStatusChange,
    UserEntity,
)
from audit_tracker.domain.enums import (
    EscalationPriority,
    ObservationStatus,
    TaskAction,
    TaskFrequency,
    TaskPriority,
    TaskStatus,
    UserRole,
)
from audit_tracker.domain.exceptions import (
    AuditTrackerException,
    AuthenticationException,
    AuthorizationException,
    ConcurrentModificationError,
    ConcurrentModificationException,
    InvalidTransitionError,
    InvalidTransitionException,
    NotFoundError,
    ResourceNotFoundException,
    ValidationError,
    ValidationException,
)

__all__ = [
    # Entities
    "TaskAttachment",
    "TaskComment",
    "TaskEntity",
    "TaskStatusChange",
    "UserEntity",
    # Enums
    "EscalationPriority",
    "ObservationStatus",
    "TaskAction",
    "TaskFrequency",
    "TaskPriority",
    "TaskStatus",
    "UserRole",
    # Exceptions
    "AuditTrackerException",
    "AuthenticationException",
    "AuthorizationException",
    "ConcurrentModificationError",
    "ConcurrentModificationException",
    "InvalidTransitionError",
    "InvalidTransitionException",
    "NotFoundError",
    "ResourceNotFoundException",
    "ValidationError",
    "ValidationException",
]
