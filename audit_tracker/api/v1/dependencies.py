"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for repositories, the current user and the
application services. Routes depend only on these dependencies, not on
infrastructure directly.

When database_backend is 'postgres', repositories use SQLAlchemy sessions
(one transactional session per write request). When it is 'memory', the
process-wide repositories created in create_app() are read from app.state.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from audit_tracker.application.interfaces.repositories import (
    ITaskRepository,
    IUserRepository,
)
from audit_tracker.application.interfaces.services import INotificationSink
from audit_tracker.application.services import (
    TaskAdminService,
    TaskWorkflowEngine,
    UserService,
)
from audit_tracker.core.config import get_settings
from audit_tracker.domain.entities import UserEntity
from audit_tracker.domain.exceptions import AuthenticationException
from audit_tracker.infrastructure.persistence.database import (
    get_db,
    transactional_session,
)
from audit_tracker.infrastructure.persistence.repositories import (
    TaskRepository,
    UserRepository,
)
from audit_tracker.infrastructure.security.jwt import verify_token
from audit_tracker.infrastructure.services.notification_sink import (
    PostCommitNotificationSink,
)


@dataclass
class Repositories:
    """Task and user repositories bound to the same session (or the in-memory stores)."""

    tasks: ITaskRepository
    users: IUserRepository
    notifications: INotificationSink | None = None


def _memory_repositories(request: Request) -> Repositories:
    return Repositories(
        tasks=request.app.state.task_repo,
        users=request.app.state.user_repo,
        notifications=get_notification_sink(request),
    )


async def _get_repositories_read(request: Request) -> AsyncGenerator[Repositories, None]:
    """Yield repositories for reads (SQL session without commit, or in-memory)."""
    if get_settings().database_backend == "postgres":
        async for session in get_db():
            yield Repositories(tasks=TaskRepository(session), users=UserRepository(session))
    else:
        yield _memory_repositories(request)


async def _get_repositories_write(request: Request) -> AsyncGenerator[Repositories, None]:
    """Yield repositories for writes (SQL session committed on success, or in-memory).

    With SQL, status-change events are held back and handed to the sink only
    after the transaction has committed; a failed commit publishes nothing.
    In-memory saves are final immediately, so events go straight to the sink.
    """
    if get_settings().database_backend == "postgres":
        outbox = PostCommitNotificationSink(get_notification_sink(request))
        async with transactional_session() as session:
            yield Repositories(
                tasks=TaskRepository(session),
                users=UserRepository(session),
                notifications=outbox,
            )
        await outbox.flush()
    else:
        yield _memory_repositories(request)


def get_notification_sink(request: Request) -> INotificationSink:
    """Sink created once in create_app() (log or memory, from settings)."""
    return request.app.state.notification_sink


_http_bearer = HTTPBearer(auto_error=False)


async def get_current_user_optional(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
    repos: Annotated[Repositories, Depends(_get_repositories_read)],
) -> UserEntity | None:
    """Return current user from JWT if present and valid; else None."""
    if not credentials:
        return None
    try:
        payload = verify_token(credentials.credentials)
    except ValueError:
        return None
    user = await repos.users.get_by_id(payload["sub"])
    if user is None or not user.is_active:
        return None
    return user


async def get_current_user(
    current_user: Annotated[UserEntity | None, Depends(get_current_user_optional)],
) -> UserEntity:
    """Return current user from JWT; raise AuthenticationException (401) if missing or invalid."""
    if current_user is None:
        raise AuthenticationException("Not authenticated")
    return current_user


async def get_workflow_engine_for_read(
    repos: Annotated[Repositories, Depends(_get_repositories_read)],
) -> TaskWorkflowEngine:
    """Workflow engine for listing and reading tasks."""
    return TaskWorkflowEngine(repos.tasks)


async def get_workflow_engine(
    repos: Annotated[Repositories, Depends(_get_repositories_write)],
) -> TaskWorkflowEngine:
    """Workflow engine for mutations; status changes are published to the sink."""
    return TaskWorkflowEngine(repos.tasks, repos.notifications)


async def get_task_admin_service(
    repos: Annotated[Repositories, Depends(_get_repositories_write)],
) -> TaskAdminService:
    """Task creation with assignee checks against the user repository."""
    return TaskAdminService(repos.tasks, repos.users)


async def get_user_service(
    repos: Annotated[Repositories, Depends(_get_repositories_write)],
) -> UserService:
    return UserService(repos.users)
