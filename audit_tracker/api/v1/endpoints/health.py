"""Health check endpoint. No dependencies; used for liveness checks."""

from fastapi import APIRouter

from audit_tracker.core.config import get_settings
from audit_tracker.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return ok status with version and configured backend."""
    settings = get_settings()
    return HealthResponse(
        version=settings.app_version,
        database_backend=settings.database_backend,
    )
