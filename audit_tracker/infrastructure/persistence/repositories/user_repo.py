"""User repository (SQLAlchemy). Interface methods return domain UserEntity."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from audit_tracker.domain.entities import UserEntity
from audit_tracker.domain.enums import UserRole
from audit_tracker.domain.exceptions import ValidationException
from audit_tracker.infrastructure.persistence.models.user import User


def _user_to_entity(u: User) -> UserEntity:
    """Map ORM User to domain UserEntity."""
    return UserEntity(
        id=u.id,
        name=u.name,
        email=u.email,
        role=UserRole(u.role),
        roles=frozenset(UserRole(r) for r in u.roles),
        is_active=u.is_active,
    )


class UserRepository:
    """User repository. Implements IUserRepository."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_by_id(self, user_id: str) -> UserEntity | None:
        row = await self.db.get(User, user_id)
        return _user_to_entity(row) if row else None

    async def get_by_email(self, email: str) -> UserEntity | None:
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == email.lower())
        )
        row = result.scalar_one_or_none()
        return _user_to_entity(row) if row else None

    async def add(self, user: UserEntity) -> UserEntity:
        """Insert user; raise ValidationException on duplicate email."""
        self.db.add(
            User(
                id=user.id,
                name=user.name,
                email=user.email,
                role=user.role.value,
                roles=sorted(r.value for r in user.roles),
                is_active=user.is_active,
            )
        )
        try:
            await self.db.flush()
        except IntegrityError as e:
            raise ValidationException(
                "A user with this email already exists", field="email"
            ) from e
        return user

    async def list_all(self) -> list[UserEntity]:
        result = await self.db.execute(select(User).order_by(User.name, User.id))
        return [_user_to_entity(u) for u in result.scalars().all()]
