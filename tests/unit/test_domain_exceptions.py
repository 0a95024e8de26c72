"""Tests for domain exceptions (error_code, message, details)."""

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


def test_base_exception_default_error_code() -> None:
    """Base AuditTrackerException uses class name as error_code when not provided."""
    exc = AuditTrackerException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "AuditTrackerException"
    assert exc.details == {}
    assert exc.to_dict() == {
        "error": "AuditTrackerException",
        "message": "Something failed",
        "details": {},
    }


def test_validation_exception_with_extra_details() -> None:
    exc = ValidationException("Observation status required", field="observation_status", task_id="t1")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "observation_status", "task_id": "t1"}


def test_validation_exception_without_field() -> None:
    exc = ValidationException("Invalid")
    assert exc.details == {}


def test_invalid_transition_exception() -> None:
    exc = InvalidTransitionException("t1", "submitted", "checker2-approve", "checker2", "no_edge")
    assert exc.error_code == "INVALID_TRANSITION"
    assert "checker2-approve" in exc.message
    assert exc.details == {
        "task_id": "t1",
        "status": "submitted",
        "action": "checker2-approve",
        "actor_role": "checker2",
        "reason": "no_edge",
    }


def test_resource_not_found_exception() -> None:
    exc = ResourceNotFoundException("task", "t-404")
    assert exc.error_code == "RESOURCE_NOT_FOUND"
    assert exc.message == "task not found: t-404"
    assert exc.details == {"resource_type": "task", "resource_id": "t-404"}


def test_concurrent_modification_exception() -> None:
    exc = ConcurrentModificationException("t1", expected_version=2, current_version=3)
    assert exc.error_code == "CONCURRENT_MODIFICATION"
    assert exc.details == {"task_id": "t1", "expected_version": 2, "current_version": 3}


def test_concurrent_modification_without_current_version() -> None:
    exc = ConcurrentModificationException("t1", expected_version=2)
    assert "current_version" not in exc.details


def test_authentication_exception() -> None:
    exc = AuthenticationException()
    assert exc.message == "Authentication failed"
    assert exc.error_code == "AUTHENTICATION_ERROR"


def test_authorization_exception_with_resource_and_action() -> None:
    exc = AuthorizationException(resource="task", action="create")
    assert exc.error_code == "PERMISSION_DENIED"
    assert exc.message == "Permission denied: create on task"
    assert exc.details == {"resource": "task", "action": "create"}


def test_workflow_error_aliases() -> None:
    assert ValidationError is ValidationException
    assert InvalidTransitionError is InvalidTransitionException
    assert NotFoundError is ResourceNotFoundException
    assert ConcurrentModificationError is ConcurrentModificationException
    assert issubclass(InvalidTransitionError, AuditTrackerException)
