"""Task approval state machine and role-scoped visibility.

TRANSITIONS is the only place a status change is defined. Each edge is keyed
by (current status, action) and names the role that may take it; the acting
user must also be the user assigned to that role on the task.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from datetime import datetime
from types import MappingProxyType

from audit_tracker.domain.entities.task import (
    ASSIGNEE_FIELDS,
    TaskComment,
    TaskEntity,
    TaskStatusChange,
)
from audit_tracker.domain.entities.user import UserEntity
from audit_tracker.domain.enums import TaskAction, TaskStatus, UserRole
from audit_tracker.domain.exceptions import (
    InvalidTransitionException,
    ValidationException,
)
from audit_tracker.shared.utils.generators import generate_cuid


@dataclass(frozen=True)
class Transition:
    """One edge of the workflow: who may move a task from one status to another."""

    from_status: TaskStatus
    action: TaskAction
    to_status: TaskStatus
    actor_role: UserRole


# Statuses in which the maker owns the task (may start, submit, set observation status).
MAKER_EDITABLE_STATUSES: frozenset[TaskStatus] = frozenset(
    {TaskStatus.PENDING, TaskStatus.IN_PROGRESS, TaskStatus.REJECTED}
)


def _build_transitions() -> Mapping[tuple[TaskStatus, TaskAction], Transition]:
    edges: list[Transition] = []
    for status in (TaskStatus.PENDING, TaskStatus.IN_PROGRESS, TaskStatus.REJECTED):
        edges.append(
            Transition(status, TaskAction.START, TaskStatus.IN_PROGRESS, UserRole.MAKER)
        )
        edges.append(
            Transition(status, TaskAction.SUBMIT, TaskStatus.SUBMITTED, UserRole.MAKER)
        )
    edges.extend(
        [
            Transition(
                TaskStatus.SUBMITTED,
                TaskAction.CHECKER1_APPROVE,
                TaskStatus.CHECKER1_APPROVED,
                UserRole.CHECKER1,
            ),
            Transition(
                TaskStatus.SUBMITTED,
                TaskAction.REJECT,
                TaskStatus.REJECTED,
                UserRole.CHECKER1,
            ),
            Transition(
                TaskStatus.CHECKER1_APPROVED,
                TaskAction.CHECKER2_APPROVE,
                TaskStatus.APPROVED,
                UserRole.CHECKER2,
            ),
            Transition(
                TaskStatus.CHECKER1_APPROVED,
                TaskAction.REJECT,
                TaskStatus.REJECTED,
                UserRole.CHECKER2,
            ),
        ]
    )
    return MappingProxyType({(e.from_status, e.action): e for e in edges})


TRANSITIONS: Mapping[tuple[TaskStatus, TaskAction], Transition] = _build_transitions()


def find_transition(status: TaskStatus, action: TaskAction) -> Transition | None:
    """Return the edge for (status, action), or None when the action is not defined there."""
    return TRANSITIONS.get((TaskStatus(status), TaskAction(action)))


@dataclass(frozen=True)
class TaskFilter:
    """Task predicate that repositories may also translate into a storage query.

    Matches tasks whose assignee_field equals user_id (when set), whose
    status equals status (when set) and whose parent_task_id equals
    parent_task_id (when set). The empty filter matches every task.
    """

    assignee_field: str | None = None
    user_id: str | None = None
    status: TaskStatus | None = None
    parent_task_id: str | None = None

    def __call__(self, task: TaskEntity) -> bool:
        if self.assignee_field is not None and getattr(task, self.assignee_field) != self.user_id:
            return False
        if self.parent_task_id is not None and task.parent_task_id != self.parent_task_id:
            return False
        return self.status is None or task.status == self.status


def visibility_predicate(user: UserEntity, status: TaskStatus | None = None) -> TaskFilter:
    """Return the filter selecting the tasks the user may see.

    admin sees everything; maker, checker1 and checker2 see only tasks where
    they hold the matching assignment.
    """
    wanted = TaskStatus(status) if status is not None else None
    if user.role == UserRole.ADMIN:
        return TaskFilter(status=wanted)
    return TaskFilter(
        assignee_field=ASSIGNEE_FIELDS[user.role], user_id=user.id, status=wanted
    )


def can_view(user: UserEntity, task: TaskEntity) -> bool:
    """Return whether the user may see the task."""
    return visibility_predicate(user)(task)


def is_actor_for(user: UserEntity, task: TaskEntity, role: UserRole) -> bool:
    """Return whether the user acts as role on this task (primary role and assignment both match)."""
    return user.role == role and task.assignee_for(role) == user.id


def check_transition(
    task: TaskEntity, actor: UserEntity, action: TaskAction
) -> Transition:
    """Return the edge the actor may take, or raise.

    Raises:
        InvalidTransitionException: No edge for (status, action), or the actor
            does not hold the edge's role on this task.
        ValidationException: Submitting without an observation status.
    """
    edge = find_transition(task.status, action)
    if edge is None:
        raise InvalidTransitionException(
            task.id, task.status.value, TaskAction(action).value, actor.role.value, "no_edge"
        )
    if actor.role != edge.actor_role:
        raise InvalidTransitionException(
            task.id, task.status.value, edge.action.value, actor.role.value, "wrong_role"
        )
    if task.assignee_for(edge.actor_role) != actor.id:
        raise InvalidTransitionException(
            task.id, task.status.value, edge.action.value, actor.role.value, "not_assignee"
        )
    if edge.action == TaskAction.SUBMIT and task.observation_status is None:
        raise ValidationException(
            "Observation status must be set before submitting",
            field="observation_status",
            task_id=task.id,
        )
    return edge


def transition_task(
    task: TaskEntity,
    actor: UserEntity,
    action: TaskAction,
    now: datetime,
    comment: str | None = None,
    *,
    id_factory: Callable[[], str] = generate_cuid,
) -> TaskEntity:
    """Apply action to the task snapshot and return the new snapshot.

    Pure: the input task is never modified. Status, updated_at, submitted_at
    (each time the task enters submitted), the optional comment
    and the history entry are applied together or not at all.
    """
    edge = check_transition(task, actor, action)

    text = comment.strip() if comment else ""
    comments = task.comments
    comment_id: str | None = None
    if text:
        comment_id = id_factory()
        comments = (
            *comments,
            TaskComment(id=comment_id, author_id=actor.id, content=text, created_at=now),
        )

    change = TaskStatusChange(
        id=id_factory(),
        from_status=task.status,
        to_status=edge.to_status,
        action=edge.action,
        actor_id=actor.id,
        changed_at=now,
        comment_id=comment_id,
    )
    submitted_at = now if edge.to_status == TaskStatus.SUBMITTED else task.submitted_at

    return replace(
        task,
        status=edge.to_status,
        updated_at=now,
        submitted_at=submitted_at,
        comments=comments,
        history=(*task.history, change),
    )


def available_actions(user: UserEntity, task: TaskEntity) -> list[TaskAction]:
    """Return the actions the user could take on the task right now (ignoring preconditions)."""
    actions: list[TaskAction] = []
    for (status, action), edge in TRANSITIONS.items():
        if status == task.status and is_actor_for(user, task, edge.actor_role):
            actions.append(action)
    return actions
