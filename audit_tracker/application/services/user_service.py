"""User management (admin-only creation) and lookup for authentication."""

from __future__ import annotations

from collections.abc import Callable

from audit_tracker.application.dtos.user import UserCreate
from audit_tracker.application.interfaces.repositories import IUserRepository
from audit_tracker.domain.entities import UserEntity
from audit_tracker.domain.enums import UserRole
from audit_tracker.domain.exceptions import AuthorizationException, ValidationException
from audit_tracker.shared.telemetry.logging import get_logger
from audit_tracker.shared.utils.generators import generate_cuid

logger = get_logger(__name__)


class UserService:
    """Creates and looks up users."""

    def __init__(
        self,
        user_repo: IUserRepository,
        *,
        id_factory: Callable[[], str] = generate_cuid,
    ) -> None:
        self.user_repo = user_repo
        self._id_factory = id_factory

    async def get_user(self, user_id: str) -> UserEntity | None:
        return await self.user_repo.get_by_id(user_id)

    async def list_users(self, actor: UserEntity) -> list[UserEntity]:
        """Return all users (admin only)."""
        if not actor.is_admin:
            raise AuthorizationException(resource="user", action="read")
        return await self.user_repo.list_all()

    async def create_user(self, actor: UserEntity, data: UserCreate) -> UserEntity:
        """Create a user. Only admins may create users; email must be unique."""
        if not actor.is_admin:
            raise AuthorizationException(resource="user", action="create")
        email = data.email.strip().lower()
        if not email:
            raise ValidationException("Email is required", field="email")
        if await self.user_repo.get_by_email(email) is not None:
            raise ValidationException("Email is already registered", field="email")
        role = UserRole(data.role)
        roles = frozenset(UserRole(r) for r in data.roles) or frozenset({role})
        user = UserEntity(
            id=self._id_factory(),
            name=data.name.strip(),
            email=email,
            role=role,
            roles=roles,
        )
        created = await self.user_repo.add(user)
        logger.info("User %s (%s) created by admin %s", created.id, role.value, actor.id)
        return created
