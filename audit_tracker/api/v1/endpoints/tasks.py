"""Task API: thin routes delegating to TaskWorkflowEngine and TaskAdminService.

Tasks outside the caller's assignments answer 404, the same as unknown ids.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from audit_tracker.api.v1.dependencies import (
    get_current_user,
    get_task_admin_service,
    get_workflow_engine,
    get_workflow_engine_for_read,
)
from audit_tracker.application.dtos.task import AttachmentCreate, TaskCreate, TaskUpdate
from audit_tracker.application.services import TaskAdminService, TaskWorkflowEngine
from audit_tracker.core.limiter import limit_writes
from audit_tracker.domain.entities import TaskEntity, UserEntity
from audit_tracker.domain.enums import TaskStatus
from audit_tracker.domain.escalation import Escalation, is_overdue
from audit_tracker.domain.workflow import available_actions
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
from audit_tracker.shared.utils.datetime import utc_now

router = APIRouter()


def _task_response(task: TaskEntity, user: UserEntity) -> TaskResponse:
    response = TaskResponse.model_validate(task)
    response.is_overdue = is_overdue(task, utc_now())
    response.available_actions = available_actions(user, task)
    return response


def _escalation_response(escalation: Escalation, user: UserEntity) -> EscalationResponse:
    return EscalationResponse(
        task=_task_response(escalation.task, user),
        reason=escalation.reason,
        priority=escalation.priority,
        days_overdue=escalation.days_overdue,
    )


@router.get("", response_model=list[TaskResponse])
async def list_tasks(
    current_user: Annotated[UserEntity, Depends(get_current_user)],
    engine: Annotated[TaskWorkflowEngine, Depends(get_workflow_engine_for_read)],
    status: Annotated[TaskStatus | None, Query()] = None,
):
    """List the tasks visible to the caller, ordered by due date."""
    tasks = await engine.list_visible_tasks(current_user, status)
    return [_task_response(t, current_user) for t in tasks]


@router.get("/escalations", response_model=list[EscalationResponse])
async def list_escalations(
    current_user: Annotated[UserEntity, Depends(get_current_user)],
    engine: Annotated[TaskWorkflowEngine, Depends(get_workflow_engine_for_read)],
):
    """Rejected and overdue tasks visible to the caller, most urgent first."""
    escalations = await engine.list_escalations(current_user)
    return [_escalation_response(e, current_user) for e in escalations]


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: str,
    current_user: Annotated[UserEntity, Depends(get_current_user)],
    engine: Annotated[TaskWorkflowEngine, Depends(get_workflow_engine_for_read)],
):
    """Get one task with its comments, attachments and status history."""
    task = await engine.get_visible_task(current_user, task_id)
    return _task_response(task, current_user)


@router.post("", response_model=TaskResponse, status_code=201)
@limit_writes
async def create_task(
    request: Request,
    body: TaskCreateRequest,
    current_user: Annotated[UserEntity, Depends(get_current_user)],
    admin_svc: Annotated[TaskAdminService, Depends(get_task_admin_service)],
):
    """Create a pending task (admin only)."""
    created = await admin_svc.create_task(
        current_user, TaskCreate(**body.model_dump())
    )
    return _task_response(created, current_user)


@router.post("/{task_id}/transitions", response_model=TaskResponse)
@limit_writes
async def transition_task(
    request: Request,
    task_id: str,
    body: TransitionRequest,
    current_user: Annotated[UserEntity, Depends(get_current_user)],
    engine: Annotated[TaskWorkflowEngine, Depends(get_workflow_engine)],
):
    """Apply a workflow action (start, submit, checker1-approve, checker2-approve, reject)."""
    task = await engine.apply_transition(
        current_user,
        task_id,
        body.action,
        body.comment,
        expected_version=body.expected_version,
    )
    return _task_response(task, current_user)


@router.put("/{task_id}/observation-status", response_model=TaskResponse)
@limit_writes
async def set_observation_status(
    request: Request,
    task_id: str,
    body: ObservationStatusRequest,
    current_user: Annotated[UserEntity, Depends(get_current_user)],
    engine: Annotated[TaskWorkflowEngine, Depends(get_workflow_engine)],
):
    """Set the observation status (assigned maker, while the maker owns the task)."""
    task = await engine.set_observation_status(
        current_user,
        task_id,
        body.observation_status,
        expected_version=body.expected_version,
    )
    return _task_response(task, current_user)


@router.post("/{task_id}/comments", response_model=TaskResponse, status_code=201)
@limit_writes
async def add_comment(
    request: Request,
    task_id: str,
    body: CommentCreateRequest,
    current_user: Annotated[UserEntity, Depends(get_current_user)],
    engine: Annotated[TaskWorkflowEngine, Depends(get_workflow_engine)],
):
    """Add a comment to a task the caller can see."""
    task = await engine.add_comment(current_user, task_id, body.content)
    return _task_response(task, current_user)


@router.post("/{task_id}/attachments", response_model=TaskResponse, status_code=201)
@limit_writes
async def add_attachment(
    request: Request,
    task_id: str,
    body: AttachmentCreateRequest,
    current_user: Annotated[UserEntity, Depends(get_current_user)],
    engine: Annotated[TaskWorkflowEngine, Depends(get_workflow_engine)],
):
    """Record attachment metadata (assigned maker or admin)."""
    task = await engine.add_attachment(
        current_user,
        task_id,
        AttachmentCreate(
            file_name=body.file_name,
            file_type=body.file_type,
            file_url=body.file_url,
        ),
    )
    return _task_response(task, current_user)


@router.get("/{task_id}/instances", response_model=list[TaskResponse])
async def list_task_instances(
    task_id: str,
    current_user: Annotated[UserEntity, Depends(get_current_user)],
    engine: Annotated[TaskWorkflowEngine, Depends(get_workflow_engine_for_read)],
):
    """Rolled-over instances of the task's recurring series, ordered by due date."""
    instances = await engine.list_task_instances(current_user, task_id)
    return [_task_response(t, current_user) for t in instances]


@router.put("/{task_id}", response_model=TaskResponse)
@limit_writes
async def update_task(
    request: Request,
    task_id: str,
    body: TaskUpdateRequest,
    current_user: Annotated[UserEntity, Depends(get_current_user)],
    admin_svc: Annotated[TaskAdminService, Depends(get_task_admin_service)],
):
    """Edit task details, due date or assignees (admin only). Status is not editable."""
    task = await admin_svc.update_task(
        current_user,
        task_id,
        TaskUpdate(**body.model_dump(exclude={"expected_version"}, exclude_none=True)),
        expected_version=body.expected_version,
    )
    return _task_response(task, current_user)


@router.post("/{task_id}/rollover", response_model=TaskResponse, status_code=201)
@limit_writes
async def rollover_task(
    request: Request,
    task_id: str,
    current_user: Annotated[UserEntity, Depends(get_current_user)],
    admin_svc: Annotated[TaskAdminService, Depends(get_task_admin_service)],
):
    """Create the next instance of an approved recurring task (admin only)."""
    instance = await admin_svc.rollover_recurring_task(current_user, task_id)
    return _task_response(instance, current_user)
