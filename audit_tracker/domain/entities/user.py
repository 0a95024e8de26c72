"""User domain entity (actor with a primary role)."""

from dataclasses import dataclass

from audit_tracker.domain.enums import UserRole
from audit_tracker.domain.exceptions import ValidationException


@dataclass(frozen=True)
class UserEntity:
    """Domain entity for an authenticated actor.

    Invariants: roles is non-empty and contains the primary role; admin is
    exclusive (if present it is the only role).
    """

    id: str
    name: str
    email: str
    role: UserRole
    roles: frozenset[UserRole]
    is_active: bool = True

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Validate user business rules. Raises ValidationException if invalid."""
        if not self.id:
            raise ValidationException("User ID is required", field="id")
        if not self.roles:
            raise ValidationException("User must have at least one role", field="roles")
        if self.role not in self.roles:
            raise ValidationException(
                "Primary role must be one of the user's roles", field="role"
            )
        if UserRole.ADMIN in self.roles and len(self.roles) > 1:
            raise ValidationException(
                "Admin role cannot be combined with other roles", field="roles"
            )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def has_role(self, role: UserRole) -> bool:
        """Return whether role is among the user's roles (not only the primary one)."""
        return role in self.roles
