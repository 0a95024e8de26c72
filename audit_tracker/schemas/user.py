"""User API schemas."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from audit_tracker.domain.enums import UserRole


class UserCreateRequest(BaseModel):
    """Request body for creating a user (admin only). roles defaults to [role]."""

    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    role: UserRole
    roles: list[UserRole] = Field(default_factory=list)


class UserResponse(BaseModel):
    """User response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    role: UserRole
    roles: list[UserRole]
    is_active: bool
