"""Application lifespan: startup and shutdown.

Only wiring of infrastructure here: logging the selected backends on
startup and disposing the SQL engine on shutdown.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from audit_tracker.core.config import get_settings
from audit_tracker.infrastructure.persistence.database import dispose_engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit dispose the SQL engine (if one was created)."""
    settings = get_settings()
    logger.info(
        "Starting %s %s (database_backend=%s, notification_sink=%s)",
        settings.app_name,
        settings.app_version,
        settings.database_backend,
        settings.notification_sink,
    )

    yield

    await dispose_engine()
    logger.info("Shutdown complete")
