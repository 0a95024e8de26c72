"""Tests for domain entities (TaskEntity, UserEntity) and enums."""

from datetime import UTC, datetime

import pytest

from audit_tracker.domain.entities import TaskAttachment, TaskComment, UserEntity
from audit_tracker.domain.enums import (
    ObservationStatus,
    TaskAction,
    TaskFrequency,
    TaskStatus,
    UserRole,
)
from audit_tracker.domain.exceptions import ValidationException


class TestEnums:
    def test_task_status_values(self) -> None:
        assert TaskStatus.values() == [
            "pending",
            "in-progress",
            "submitted",
            "checker1-approved",
            "approved",
            "rejected",
        ]

    def test_wire_values(self) -> None:
        assert TaskAction("checker2-approve") == TaskAction.CHECKER2_APPROVE
        assert TaskFrequency("bi-weekly") == TaskFrequency.BI_WEEKLY
        assert ObservationStatus.values() == ["yes", "no", "mixed"]
        assert UserRole.values() == ["admin", "maker", "checker1", "checker2"]

    def test_dead_statuses_are_not_modelled(self) -> None:
        for value in ("draft", "in_review", "escalated"):
            with pytest.raises(ValueError):
                TaskStatus(value)


class TestTaskEntity:
    def test_valid_task(self, make_task) -> None:
        task = make_task()
        assert task.status == TaskStatus.PENDING
        assert task.version == 1
        assert task.assignee_for(UserRole.MAKER) == task.assigned_to
        assert task.assignee_for(UserRole.CHECKER2) == task.checker2
        assert task.assignee_for(UserRole.ADMIN) is None

    def test_assignees_must_be_distinct(self, make_task, users) -> None:
        with pytest.raises(ValidationException) as exc_info:
            make_task(checker1=users["maker"].id)
        assert exc_info.value.details["field"] == "assignees"

    def test_name_required(self, make_task) -> None:
        with pytest.raises(ValidationException) as exc_info:
            make_task(name="  ")
        assert exc_info.value.details["field"] == "name"

    def test_missing_assignee(self, make_task) -> None:
        with pytest.raises(ValidationException) as exc_info:
            make_task(checker2="")
        assert exc_info.value.details["field"] == "checker2"

    def test_task_cannot_be_its_own_parent(self, make_task) -> None:
        with pytest.raises(ValidationException) as exc_info:
            make_task(id="loop", parent_task_id="loop")
        assert exc_info.value.details["field"] == "parent_task_id"

    def test_version_must_be_positive(self, make_task) -> None:
        with pytest.raises(ValidationException):
            make_task(version=0)

    def test_task_is_frozen(self, make_task) -> None:
        task = make_task()
        with pytest.raises(AttributeError):
            task.status = TaskStatus.APPROVED  # type: ignore[misc]

    def test_with_comment_and_attachment_return_copies(self, make_task) -> None:
        task = make_task()
        at = datetime(2025, 3, 5, 10, 0, tzinfo=UTC)
        commented = task.with_comment(TaskComment("c1", "maker-1", "Looks fine", at), at)
        attached = commented.with_attachment(
            TaskAttachment("a1", "maker-1", "evidence.pdf", "application/pdf", "s3://b/k", at),
            at,
        )
        assert task.comments == () and task.attachments == ()
        assert [c.id for c in attached.comments] == ["c1"]
        assert [a.id for a in attached.attachments] == ["a1"]
        assert attached.updated_at == at


class TestUserEntity:
    def test_roles_must_contain_primary_role(self) -> None:
        with pytest.raises(ValidationException) as exc_info:
            UserEntity("u1", "U", "u@x.test", UserRole.MAKER, frozenset({UserRole.CHECKER1}))
        assert exc_info.value.details["field"] == "role"

    def test_roles_required(self) -> None:
        with pytest.raises(ValidationException):
            UserEntity("u1", "U", "u@x.test", UserRole.MAKER, frozenset())

    def test_admin_is_exclusive(self) -> None:
        with pytest.raises(ValidationException):
            UserEntity(
                "u1",
                "U",
                "u@x.test",
                UserRole.ADMIN,
                frozenset({UserRole.ADMIN, UserRole.MAKER}),
            )

    def test_multi_role_user(self) -> None:
        user = UserEntity(
            "u1",
            "U",
            "u@x.test",
            UserRole.CHECKER1,
            frozenset({UserRole.CHECKER1, UserRole.CHECKER2}),
        )
        assert user.has_role(UserRole.CHECKER2)
        assert not user.is_admin
