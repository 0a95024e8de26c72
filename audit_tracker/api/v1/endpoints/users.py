"""User API: current user and admin-only user creation."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from audit_tracker.api.v1.dependencies import get_current_user, get_user_service
from audit_tracker.application.dtos.user import UserCreate
from audit_tracker.application.services import UserService
from audit_tracker.core.limiter import limit_writes
from audit_tracker.domain.entities import UserEntity
from audit_tracker.schemas.user import UserCreateRequest, UserResponse

router = APIRouter()


def _user_response(user: UserEntity) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        roles=sorted(user.roles, key=lambda r: r.value),
        is_active=user.is_active,
    )


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: Annotated[UserEntity, Depends(get_current_user)],
):
    """Return the authenticated user."""
    return _user_response(current_user)


@router.get("", response_model=list[UserResponse])
async def list_users(
    current_user: Annotated[UserEntity, Depends(get_current_user)],
    user_svc: Annotated[UserService, Depends(get_user_service)],
):
    """List all users (admin only)."""
    return [_user_response(u) for u in await user_svc.list_users(current_user)]


@router.post("", response_model=UserResponse, status_code=201)
@limit_writes
async def create_user(
    request: Request,
    body: UserCreateRequest,
    current_user: Annotated[UserEntity, Depends(get_current_user)],
    user_svc: Annotated[UserService, Depends(get_user_service)],
):
    """Create a user (admin only)."""
    created = await user_svc.create_user(
        current_user,
        UserCreate(
            name=body.name,
            email=str(body.email),
            role=body.role,
            roles=frozenset(body.roles),
        ),
    )
    return _user_response(created)
