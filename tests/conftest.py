"""Pytest configuration and fixtures for audit-tracker.

HTTP tests build a fresh app per test with in-memory repositories; the
database_backend defaults to 'memory' here so no Postgres is needed. DB
fixtures skip unless DATABASE_BACKEND=postgres and DATABASE_URL are set.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_BACKEND", "memory")

from collections.abc import Callable  # noqa: E402
from datetime import UTC, date, datetime  # noqa: E402
from itertools import count  # noqa: E402

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from audit_tracker.core.config import get_settings  # noqa: E402
from audit_tracker.core.limiter import limiter  # noqa: E402
from audit_tracker.domain.entities import TaskEntity, UserEntity  # noqa: E402
from audit_tracker.domain.enums import (  # noqa: E402
    TaskFrequency,
    TaskPriority,
    TaskStatus,
    UserRole,
)
from audit_tracker.infrastructure.persistence import database  # noqa: E402
from audit_tracker.infrastructure.persistence.repositories import (  # noqa: E402
    InMemoryTaskRepository,
    InMemoryUserRepository,
)
from audit_tracker.infrastructure.security.jwt import create_user_token  # noqa: E402
from audit_tracker.infrastructure.services import RecordingNotificationSink  # noqa: E402
from audit_tracker.main import create_app  # noqa: E402

# Fixed "now" used by engine/escalation tests: Monday 2025-03-10 09:00 UTC.
NOW = datetime(2025, 3, 10, 9, 0, tzinfo=UTC)


def _user(user_id: str, role: UserRole, *extra: UserRole) -> UserEntity:
    return UserEntity(
        id=user_id,
        name=user_id.replace("-", " ").title(),
        email=f"{user_id}@auditco.com",
        role=role,
        roles=frozenset({role, *extra}),
    )


@pytest.fixture(autouse=True)
def _reset_rate_limits() -> None:
    """Rate-limit counters are process-wide; start each test from zero."""
    limiter.reset()


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def users() -> dict[str, UserEntity]:
    """One admin, two makers and two of each checker."""
    return {
        "admin": _user("admin-1", UserRole.ADMIN),
        "maker": _user("maker-1", UserRole.MAKER),
        "other_maker": _user("maker-2", UserRole.MAKER),
        "checker1": _user("checker1-1", UserRole.CHECKER1),
        "other_checker1": _user("checker1-2", UserRole.CHECKER1),
        "checker2": _user("checker2-1", UserRole.CHECKER2),
        "other_checker2": _user("checker2-2", UserRole.CHECKER2),
    }


@pytest.fixture
def make_task(users: dict[str, UserEntity]) -> Callable[..., TaskEntity]:
    """Factory for tasks assigned to maker-1 / checker1-1 / checker2-1 by default."""
    ids = count(1)

    def _make(**overrides) -> TaskEntity:
        fields = {
            "id": f"task-{next(ids)}",
            "name": "Quarterly access review",
            "description": "Review privileged access for the finance systems",
            "category": "IT General Controls",
            "priority": TaskPriority.HIGH,
            "frequency": TaskFrequency.QUARTERLY,
            "is_recurring": True,
            "due_date": date(2025, 3, 31),
            "assigned_to": users["maker"].id,
            "checker1": users["checker1"].id,
            "checker2": users["checker2"].id,
            "status": TaskStatus.PENDING,
            "created_at": datetime(2025, 3, 1, 8, 0, tzinfo=UTC),
            "updated_at": datetime(2025, 3, 1, 8, 0, tzinfo=UTC),
        }
        fields.update(overrides)
        return TaskEntity(**fields)

    return _make


@pytest.fixture
def task_repo() -> InMemoryTaskRepository:
    return InMemoryTaskRepository()


@pytest.fixture
def user_repo(users: dict[str, UserEntity]) -> InMemoryUserRepository:
    return InMemoryUserRepository(list(users.values()))


@pytest.fixture
def sink() -> RecordingNotificationSink:
    return RecordingNotificationSink()


@pytest.fixture
def app(
    task_repo: InMemoryTaskRepository,
    user_repo: InMemoryUserRepository,
    sink: RecordingNotificationSink,
) -> FastAPI:
    """App wired to the test's in-memory repositories and recording sink."""
    return create_app(task_repo=task_repo, user_repo=user_repo, notification_sink=sink)


@pytest.fixture
async def client(app: FastAPI) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers(users: dict[str, UserEntity]) -> Callable[[str], dict[str, str]]:
    """Return Authorization headers for the named user from the users fixture."""

    def _headers(key: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_user_token(users[key].id)}"}

    return _headers


@pytest.fixture
async def db_session() -> AsyncSession:
    """Database session for repository/integration tests. Rolls back after test.

    Requires DATABASE_BACKEND=postgres and DATABASE_URL with the schema
    migrated (alembic upgrade head). Skips when Postgres is not configured.
    """
    get_settings.cache_clear()
    database._ensure_engine()
    if database.AsyncSessionLocal is None:
        pytest.skip(
            "Postgres not configured: set DATABASE_BACKEND=postgres and DATABASE_URL, "
            "then run: alembic upgrade head"
        )
    async with database.AsyncSessionLocal() as session:
        yield session
        await session.rollback()
    await database.dispose_engine()
