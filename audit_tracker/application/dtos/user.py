"""DTOs for user use cases."""

from dataclasses import dataclass, field

from audit_tracker.domain.enums import UserRole


@dataclass(frozen=True)
class UserCreate:
    """Input for UserService.create_user. roles defaults to {role}."""

    name: str
    email: str
    role: UserRole
    roles: frozenset[UserRole] = field(default_factory=frozenset)
