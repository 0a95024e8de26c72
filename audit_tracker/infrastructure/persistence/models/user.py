"""User ORM model (actor with a primary role and a role set)."""

from sqlalchemy import JSON, Boolean, String, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from audit_tracker.infrastructure.persistence.database import Base
from audit_tracker.infrastructure.persistence.models.mixins import (
    CuidMixin,
    TimestampMixin,
)


class User(CuidMixin, TimestampMixin, Base):
    """User model. Table: app_user. Unique email."""

    __tablename__ = "app_user"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False)
    roles: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("true")
    )

    __table_args__ = (UniqueConstraint("email", name="uq_app_user_email"),)
