"""Task ORM models: task plus its append-only comments, attachments and status history."""

from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from audit_tracker.infrastructure.persistence.database import Base
from audit_tracker.infrastructure.persistence.models.mixins import (
    CuidMixin,
    TimestampMixin,
    VersionedMixin,
)


class Task(CuidMixin, TimestampMixin, VersionedMixin, Base):
    """Audit task. Table: task. version is checked on every update."""

    __tablename__ = "task"

    name: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    priority: Mapped[str] = mapped_column(String(16), nullable=False)
    frequency: Mapped[str] = mapped_column(String(16), nullable=False)
    is_recurring: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    assigned_to: Mapped[str] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    checker1: Mapped[str] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    checker2: Mapped[str] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="pending", server_default="pending"
    )
    observation_status: Mapped[str | None] = mapped_column(String(16), nullable=True)
    submitted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    parent_task_id: Mapped[str | None] = mapped_column(
        String,
        ForeignKey("task.id", ondelete="SET NULL", name="fk_task_parent_task_id"),
        nullable=True,
        index=True,
    )

    comments: Mapped[list["TaskComment"]] = relationship(
        order_by="TaskComment.created_at", cascade="all, delete-orphan"
    )
    attachments: Mapped[list["TaskAttachment"]] = relationship(
        order_by="TaskAttachment.uploaded_at", cascade="all, delete-orphan"
    )
    history: Mapped[list["TaskStatusChange"]] = relationship(
        order_by="TaskStatusChange.changed_at", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint(
            "assigned_to <> checker1 AND assigned_to <> checker2 AND checker1 <> checker2",
            name="ck_task_distinct_assignees",
        ),
        Index("ix_task_status_due", "status", "due_date"),
    )


class TaskComment(CuidMixin, Base):
    """Comment on a task. Table: task_comment."""

    __tablename__ = "task_comment"

    task_id: Mapped[str] = mapped_column(
        String, ForeignKey("task.id", ondelete="CASCADE"), nullable=False, index=True
    )
    author_id: Mapped[str] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="RESTRICT"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class TaskAttachment(CuidMixin, Base):
    """Attachment metadata. Table: task_attachment."""

    __tablename__ = "task_attachment"

    task_id: Mapped[str] = mapped_column(
        String, ForeignKey("task.id", ondelete="CASCADE"), nullable=False, index=True
    )
    uploaded_by: Mapped[str] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="RESTRICT"), nullable=False
    )
    file_name: Mapped[str] = mapped_column(String(500), nullable=False)
    file_type: Mapped[str] = mapped_column(String(200), nullable=False)
    file_url: Mapped[str] = mapped_column(Text, nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class TaskStatusChange(CuidMixin, Base):
    """One applied workflow transition. Table: task_status_change."""

    __tablename__ = "task_status_change"

    task_id: Mapped[str] = mapped_column(
        String, ForeignKey("task.id", ondelete="CASCADE"), nullable=False, index=True
    )
    from_status: Mapped[str] = mapped_column(String(32), nullable=False)
    to_status: Mapped[str] = mapped_column(String(32), nullable=False)
    action: Mapped[str] = mapped_column(String(32), nullable=False)
    actor_id: Mapped[str] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="RESTRICT"), nullable=False
    )
    comment_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("task_comment.id", ondelete="SET NULL"), nullable=True
    )
    changed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
