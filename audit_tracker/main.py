"""FastAPI application entry point.

Wiring only: logging, lifespan, exception handlers, middleware, routers and
the in-memory stores used by the 'memory' backend. See
audit_tracker.core.lifespan and audit_tracker.core.exception_handlers.

Settings are loaded inside create_app() so that tests can set env (and
optionally clear get_settings cache) before calling create_app().
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from audit_tracker.api.v1 import api_router
from audit_tracker.application.interfaces.repositories import (
    ITaskRepository,
    IUserRepository,
)
from audit_tracker.application.interfaces.services import INotificationSink
from audit_tracker.core.config import Settings, get_settings
from audit_tracker.core.exception_handlers import register_exception_handlers
from audit_tracker.core.lifespan import create_lifespan
from audit_tracker.core.limiter import limiter
from audit_tracker.domain.entities import UserEntity
from audit_tracker.domain.enums import UserRole
from audit_tracker.infrastructure.persistence.repositories import (
    InMemoryTaskRepository,
    InMemoryUserRepository,
)
from audit_tracker.infrastructure.services import build_notification_sink
from audit_tracker.middleware import RequestIDMiddleware
from audit_tracker.shared.telemetry.logging import get_logger, setup_logging

logger = get_logger(__name__)


def _bootstrap_users(settings: Settings) -> list[UserEntity]:
    """Admin seeded into the in-memory user store (bootstrap_admin_id set, memory backend)."""
    if settings.database_backend != "memory" or not settings.bootstrap_admin_id:
        return []
    logger.info("Seeding bootstrap admin %s", settings.bootstrap_admin_id)
    return [
        UserEntity(
            id=settings.bootstrap_admin_id,
            name="Administrator",
            email=settings.bootstrap_admin_email.lower(),
            role=UserRole.ADMIN,
            roles=frozenset({UserRole.ADMIN}),
        )
    ]


def create_app(
    *,
    task_repo: ITaskRepository | None = None,
    user_repo: IUserRepository | None = None,
    notification_sink: INotificationSink | None = None,
) -> FastAPI:
    """Build and return the FastAPI application.

    task_repo/user_repo replace the in-memory stores of the 'memory' backend
    (ignored for 'postgres'); notification_sink replaces the configured sink.
    """
    settings = get_settings()
    setup_logging()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )

    app.state.task_repo = task_repo or InMemoryTaskRepository()
    app.state.user_repo = user_repo or InMemoryUserRepository(_bootstrap_users(settings))
    app.state.notification_sink = notification_sink or build_notification_sink(
        settings.notification_sink
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    register_exception_handlers(app)

    # Middleware: last added = outermost (request ID wraps CORS).
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware, header_name=settings.request_id_header)

    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()
