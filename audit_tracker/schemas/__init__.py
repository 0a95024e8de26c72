"""Pydantic request/response schemas for the API."""

from audit_tracker.schemas.health import HealthResponse
from audit_tracker.schemas.task import (
    AttachmentCreateRequest,
    CommentCreateRequest,
    EscalationResponse,
    ObservationStatusRequest,
    TaskCreateRequest,
    TaskResponse,
    TaskUpdateRequest,
    TransitionRequest,
)
from audit_tracker.schemas.user import UserCreateRequest, UserResponse

__all__ = [
    "AttachmentCreateRequest",
    "CommentCreateRequest",
    "EscalationResponse",
    "HealthResponse",
    "ObservationStatusRequest",
    "TaskCreateRequest",
    "TaskResponse",
    "TaskUpdateRequest",
    "TransitionRequest",
    "UserCreateRequest",
    "UserResponse",
]
