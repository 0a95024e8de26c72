"""Tests for TaskWorkflowEngine against the in-memory repository and recording sink."""

import asyncio
import itertools
import logging
from datetime import UTC, date, datetime, timedelta

import pytest

from audit_tracker.application.dtos.task import AttachmentCreate
from audit_tracker.application.services import TaskWorkflowEngine
from audit_tracker.domain.enums import (
    EscalationPriority,
    ObservationStatus,
    TaskAction,
    TaskStatus,
    UserRole,
)
from audit_tracker.domain.exceptions import (
    AuthorizationException,
    ConcurrentModificationException,
    InvalidTransitionException,
    ResourceNotFoundException,
    ValidationException,
)
from audit_tracker.domain.workflow import TRANSITIONS
from audit_tracker.infrastructure.persistence.repositories import InMemoryTaskRepository

ROLE_USER_KEYS = {
    UserRole.ADMIN: "admin",
    UserRole.MAKER: "maker",
    UserRole.CHECKER1: "checker1",
    UserRole.CHECKER2: "checker2",
}


class FixedClock:
    """Clock returning a fixed instant that tests can advance."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current


class FailingSink:
    async def publish(self, event) -> None:
        raise RuntimeError("mail relay unavailable")


class StaleReadTaskRepository(InMemoryTaskRepository):
    """Yields to the event loop after reading, so concurrent callers share a snapshot."""

    async def get_by_id(self, task_id: str):
        task = await super().get_by_id(task_id)
        await asyncio.sleep(0)
        return task


@pytest.fixture
def clock(now) -> FixedClock:
    return FixedClock(now)


@pytest.fixture
def engine(task_repo, sink, clock) -> TaskWorkflowEngine:
    return TaskWorkflowEngine(task_repo, sink, clock=clock)


async def _seed(task_repo, task):
    return await task_repo.add(task)


class TestVisibility:
    async def test_list_visible_tasks_per_role(self, engine, task_repo, make_task, users) -> None:
        mine = await _seed(task_repo, make_task())
        other = await _seed(
            task_repo,
            make_task(
                assigned_to=users["other_maker"].id,
                checker1=users["other_checker1"].id,
                checker2=users["other_checker2"].id,
            ),
        )

        assert {t.id for t in await engine.list_visible_tasks(users["admin"])} == {mine.id, other.id}
        for key in ("maker", "checker1", "checker2"):
            assert [t.id for t in await engine.list_visible_tasks(users[key])] == [mine.id]
        for key in ("other_maker", "other_checker1", "other_checker2"):
            assert [t.id for t in await engine.list_visible_tasks(users[key])] == [other.id]

    async def test_list_is_ordered_by_due_date(self, engine, task_repo, make_task, users) -> None:
        late = await _seed(task_repo, make_task(due_date=date(2025, 6, 30)))
        early = await _seed(task_repo, make_task(due_date=date(2025, 4, 1)))
        assert [t.id for t in await engine.list_visible_tasks(users["maker"])] == [early.id, late.id]

    async def test_status_filter(self, engine, task_repo, make_task, users) -> None:
        await _seed(task_repo, make_task())
        rejected = await _seed(task_repo, make_task(status=TaskStatus.REJECTED))
        got = await engine.list_visible_tasks(users["maker"], TaskStatus.REJECTED)
        assert [t.id for t in got] == [rejected.id]

    async def test_invisible_task_is_not_found(self, engine, task_repo, make_task, users) -> None:
        task = await _seed(task_repo, make_task())
        with pytest.raises(ResourceNotFoundException):
            await engine.get_visible_task(users["other_maker"], task.id)
        with pytest.raises(ResourceNotFoundException):
            await engine.apply_transition(users["other_maker"], task.id, TaskAction.START)

    async def test_unknown_task_is_not_found(self, engine, users) -> None:
        with pytest.raises(ResourceNotFoundException) as exc_info:
            await engine.apply_transition(users["maker"], "missing", TaskAction.START)
        assert exc_info.value.details["resource_id"] == "missing"


class TestApplyTransition:
    async def test_full_approval_chain(self, engine, task_repo, sink, clock, make_task, users) -> None:
        task = await _seed(task_repo, make_task(observation_status=ObservationStatus.YES))

        await engine.apply_transition(users["maker"], task.id, TaskAction.START)
        submit_time = clock.advance(hours=1)
        await engine.apply_transition(users["maker"], task.id, TaskAction.SUBMIT, "Ready for review")
        clock.advance(hours=1)
        await engine.apply_transition(users["checker1"], task.id, TaskAction.CHECKER1_APPROVE)
        final_time = clock.advance(hours=1)
        final = await engine.apply_transition(users["checker2"], task.id, TaskAction.CHECKER2_APPROVE)

        assert final.status == TaskStatus.APPROVED
        assert final.version == 5
        assert final.submitted_at == submit_time
        assert final.updated_at == final_time
        assert [c.content for c in final.comments] == ["Ready for review"]
        assert [(e.from_status, e.to_status) for e in sink.events] == [
            (TaskStatus.PENDING, TaskStatus.IN_PROGRESS),
            (TaskStatus.IN_PROGRESS, TaskStatus.SUBMITTED),
            (TaskStatus.SUBMITTED, TaskStatus.CHECKER1_APPROVED),
            (TaskStatus.CHECKER1_APPROVED, TaskStatus.APPROVED),
        ]
        assert sink.events[-1].actor_id == users["checker2"].id
        assert sink.events[-1].timestamp == final_time
        assert await task_repo.get_by_id(task.id) == final

    async def test_submit_without_observation_status(self, engine, task_repo, sink, make_task, users) -> None:
        task = await _seed(task_repo, make_task(status=TaskStatus.IN_PROGRESS))
        with pytest.raises(ValidationException):
            await engine.apply_transition(users["maker"], task.id, TaskAction.SUBMIT)
        assert await task_repo.get_by_id(task.id) == task
        assert not sink.events

    async def test_checker2_cannot_approve_submitted_task(self, engine, task_repo, make_task, users) -> None:
        task = await _seed(task_repo, make_task(status=TaskStatus.SUBMITTED))
        with pytest.raises(InvalidTransitionException):
            await engine.apply_transition(users["checker2"], task.id, TaskAction.CHECKER2_APPROVE)
        assert (await task_repo.get_by_id(task.id)).status == TaskStatus.SUBMITTED

    async def test_unknown_action_is_an_invalid_transition(
        self, engine, task_repo, sink, make_task, users
    ) -> None:
        task = await _seed(task_repo, make_task())
        with pytest.raises(InvalidTransitionException) as exc_info:
            await engine.apply_transition(users["maker"], task.id, "archive")
        assert exc_info.value.details["reason"] == "no_edge"
        assert exc_info.value.details["action"] == "archive"
        assert await task_repo.get_by_id(task.id) == task
        assert not sink.events

    async def test_rejection_is_logged(self, engine, task_repo, make_task, users, caplog) -> None:
        task = await _seed(task_repo, make_task())
        with caplog.at_level(logging.WARNING):
            with pytest.raises(InvalidTransitionException):
                await engine.apply_transition(users["checker1"], task.id, TaskAction.REJECT)
        assert "INVALID_TRANSITION" in caplog.text

    async def test_reject_and_resubmit(self, engine, task_repo, clock, make_task, users) -> None:
        first_submit = clock.current - timedelta(days=1)
        task = await _seed(
            task_repo,
            make_task(
                status=TaskStatus.SUBMITTED,
                observation_status=ObservationStatus.MIXED,
                submitted_at=first_submit,
            ),
        )
        rejected = await engine.apply_transition(
            users["checker1"], task.id, TaskAction.REJECT, "Missing evidence"
        )
        assert rejected.status == TaskStatus.REJECTED
        assert rejected.submitted_at == first_submit

        await engine.apply_transition(users["maker"], task.id, TaskAction.START)
        resubmit_time = clock.advance(hours=3)
        resubmitted = await engine.apply_transition(
            users["maker"], task.id, TaskAction.SUBMIT, "Evidence added"
        )
        assert resubmitted.status == TaskStatus.SUBMITTED
        assert resubmitted.submitted_at == resubmit_time
        assert [c.author_id for c in resubmitted.comments] == [
            users["checker1"].id,
            users["maker"].id,
        ]
        assert len(resubmitted.history) == 3

    @pytest.mark.parametrize(
        ("status", "action", "role"),
        [
            combo
            for combo in itertools.product(TaskStatus, TaskAction, UserRole)
            if not (
                (combo[0], combo[1]) in TRANSITIONS
                and TRANSITIONS[(combo[0], combo[1])].actor_role == combo[2]
            )
        ],
    )
    async def test_every_triple_outside_the_table_is_rejected(
        self, engine, task_repo, sink, make_task, users, status, action, role
    ) -> None:
        task = await _seed(
            task_repo, make_task(status=status, observation_status=ObservationStatus.NO)
        )
        with pytest.raises(InvalidTransitionException):
            await engine.apply_transition(users[ROLE_USER_KEYS[role]], task.id, action)
        assert await task_repo.get_by_id(task.id) == task
        assert not sink.events

    @pytest.mark.parametrize(("status", "action"), list(TRANSITIONS))
    async def test_every_edge_in_the_table_succeeds(
        self, engine, task_repo, make_task, users, status, action
    ) -> None:
        edge = TRANSITIONS[(status, action)]
        task = await _seed(
            task_repo, make_task(status=status, observation_status=ObservationStatus.YES)
        )
        result = await engine.apply_transition(users[ROLE_USER_KEYS[edge.actor_role]], task.id, action)
        assert result.status == edge.to_status
        assert result.version == task.version + 1


class TestConcurrency:
    async def test_stale_expected_version(self, engine, task_repo, make_task, users) -> None:
        task = await _seed(task_repo, make_task(status=TaskStatus.SUBMITTED))
        await engine.apply_transition(
            users["checker1"], task.id, TaskAction.CHECKER1_APPROVE, expected_version=1
        )
        with pytest.raises(ConcurrentModificationException) as exc_info:
            await engine.apply_transition(
                users["checker2"], task.id, TaskAction.CHECKER2_APPROVE, expected_version=1
            )
        assert exc_info.value.details == {
            "task_id": task.id,
            "expected_version": 1,
            "current_version": 2,
        }
        assert (await task_repo.get_by_id(task.id)).status == TaskStatus.CHECKER1_APPROVED

    async def test_two_transitions_on_the_same_snapshot(self, sink, now, make_task, users) -> None:
        repo = StaleReadTaskRepository()
        engine = TaskWorkflowEngine(repo, sink, clock=lambda: now)
        task = await repo.add(make_task(status=TaskStatus.SUBMITTED))

        results = await asyncio.gather(
            engine.apply_transition(users["checker1"], task.id, TaskAction.CHECKER1_APPROVE),
            engine.apply_transition(users["checker1"], task.id, TaskAction.REJECT, "No"),
            return_exceptions=True,
        )

        succeeded = [r for r in results if not isinstance(r, Exception)]
        failed = [r for r in results if isinstance(r, Exception)]
        assert len(succeeded) == 1
        assert len(failed) == 1
        assert isinstance(failed[0], ConcurrentModificationException)
        stored = await repo.get_by_id(task.id)
        assert stored.version == 2
        assert stored.status == succeeded[0].status
        assert len(sink.events) == 1


class TestNotificationSink:
    async def test_sink_failure_does_not_undo_transition(self, task_repo, now, make_task, users, caplog) -> None:
        engine = TaskWorkflowEngine(task_repo, FailingSink(), clock=lambda: now)
        task = await _seed(task_repo, make_task())
        with caplog.at_level(logging.ERROR):
            result = await engine.apply_transition(users["maker"], task.id, TaskAction.START)
        assert result.status == TaskStatus.IN_PROGRESS
        assert (await task_repo.get_by_id(task.id)).version == 2
        assert "Notification sink failed" in caplog.text

    async def test_engine_without_sink(self, task_repo, make_task, users) -> None:
        engine = TaskWorkflowEngine(task_repo)
        task = await _seed(task_repo, make_task())
        result = await engine.apply_transition(users["maker"], task.id, TaskAction.START)
        assert result.status == TaskStatus.IN_PROGRESS


class TestObservationStatus:
    async def test_maker_sets_observation_status(self, engine, task_repo, sink, clock, make_task, users) -> None:
        task = await _seed(task_repo, make_task())
        at = clock.advance(minutes=10)
        result = await engine.set_observation_status(users["maker"], task.id, ObservationStatus.MIXED)
        assert result.observation_status == ObservationStatus.MIXED
        assert result.status == TaskStatus.PENDING
        assert result.updated_at == at
        assert result.version == 2
        assert not sink.events

    async def test_checker_cannot_set_observation_status(self, engine, task_repo, make_task, users) -> None:
        task = await _seed(task_repo, make_task())
        with pytest.raises(InvalidTransitionException):
            await engine.set_observation_status(users["checker1"], task.id, ObservationStatus.YES)

    async def test_not_editable_after_submit(self, engine, task_repo, make_task, users) -> None:
        task = await _seed(
            task_repo,
            make_task(status=TaskStatus.SUBMITTED, observation_status=ObservationStatus.YES),
        )
        with pytest.raises(InvalidTransitionException) as exc_info:
            await engine.set_observation_status(users["maker"], task.id, ObservationStatus.NO)
        assert exc_info.value.details["reason"] == "no_edge"


class TestCommentsAndAttachments:
    async def test_any_viewer_can_comment(self, engine, task_repo, make_task, users) -> None:
        task = await _seed(task_repo, make_task())
        for key in ("admin", "maker", "checker1", "checker2"):
            task = await engine.add_comment(users[key], task.id, f"note from {key}")
        assert [c.author_id for c in task.comments] == [
            users[k].id for k in ("admin", "maker", "checker1", "checker2")
        ]
        assert task.history == ()

    async def test_empty_comment_rejected(self, engine, task_repo, make_task, users) -> None:
        task = await _seed(task_repo, make_task())
        with pytest.raises(ValidationException):
            await engine.add_comment(users["maker"], task.id, "   ")

    async def test_outsider_cannot_comment(self, engine, task_repo, make_task, users) -> None:
        task = await _seed(task_repo, make_task())
        with pytest.raises(ResourceNotFoundException):
            await engine.add_comment(users["other_checker2"], task.id, "hello")

    async def test_maker_and_admin_can_attach(self, engine, task_repo, make_task, users) -> None:
        task = await _seed(task_repo, make_task())
        data = AttachmentCreate("evidence.xlsx", "application/vnd.ms-excel", "s3://audit/evidence.xlsx")
        task = await engine.add_attachment(users["maker"], task.id, data)
        task = await engine.add_attachment(users["admin"], task.id, data)
        assert [a.uploaded_by for a in task.attachments] == [users["maker"].id, users["admin"].id]
        assert task.attachments[0].file_name == "evidence.xlsx"

    async def test_checker_cannot_attach(self, engine, task_repo, make_task, users) -> None:
        task = await _seed(task_repo, make_task())
        data = AttachmentCreate("x.pdf", "application/pdf", "s3://audit/x.pdf")
        with pytest.raises(AuthorizationException):
            await engine.add_attachment(users["checker1"], task.id, data)

    async def test_attachment_requires_file_name(self, engine, task_repo, make_task, users) -> None:
        task = await _seed(task_repo, make_task())
        with pytest.raises(ValidationException):
            await engine.add_attachment(users["maker"], task.id, AttachmentCreate(" ", "x", "s3://x"))


class TestEscalations:
    async def test_sorted_most_urgent_first(self, engine, task_repo, make_task, users, now) -> None:
        low = await _seed(task_repo, make_task(due_date=date(2025, 3, 9)))
        critical = await _seed(task_repo, make_task(due_date=date(2025, 2, 1)))
        rejected = await _seed(task_repo, make_task(status=TaskStatus.REJECTED))
        high = await _seed(task_repo, make_task(status=TaskStatus.IN_PROGRESS, due_date=date(2025, 2, 28)))
        await _seed(task_repo, make_task(status=TaskStatus.APPROVED, due_date=date(2025, 1, 1)))
        await _seed(task_repo, make_task(due_date=date(2025, 4, 1)))

        escalations = await engine.list_escalations(users["maker"], now)

        assert [e.task.id for e in escalations] == [critical.id, high.id, rejected.id, low.id]
        assert [e.priority for e in escalations] == [
            EscalationPriority.CRITICAL,
            EscalationPriority.HIGH,
            EscalationPriority.HIGH,
            EscalationPriority.LOW,
        ]

    async def test_escalations_respect_visibility(self, engine, task_repo, make_task, users) -> None:
        await _seed(task_repo, make_task(status=TaskStatus.REJECTED))
        assert await engine.list_escalations(users["other_maker"]) == []
        assert len(await engine.list_escalations(users["admin"])) == 1

    async def test_uses_engine_clock_by_default(self, task_repo, make_task, users) -> None:
        engine = TaskWorkflowEngine(
            task_repo, clock=lambda: datetime(2025, 3, 20, 12, 0, tzinfo=UTC)
        )
        await _seed(task_repo, make_task(due_date=date(2025, 3, 10)))
        [escalation] = await engine.list_escalations(users["maker"])
        assert escalation.days_overdue == 10
        assert escalation.priority == EscalationPriority.HIGH
