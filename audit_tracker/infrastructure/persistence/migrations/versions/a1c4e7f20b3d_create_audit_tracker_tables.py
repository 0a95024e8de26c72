"""create audit tracker tables

Revision ID: a1c4e7f20b3d
Revises:
Create Date: 2026-10-19 09:12:41.508113

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a1c4e7f20b3d"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Upgrade schema - users, tasks, and task comments/attachments/status history."""
    op.create_table(
        "app_user",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("role", sa.String(length=16), nullable=False),
        sa.Column("roles", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email", name="uq_app_user_email"),
    )

    op.create_table(
        "task",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(length=200), nullable=False),
        sa.Column("priority", sa.String(length=16), nullable=False),
        sa.Column("frequency", sa.String(length=16), nullable=False),
        sa.Column("is_recurring", sa.Boolean(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("assigned_to", sa.String(), nullable=False),
        sa.Column("checker1", sa.String(), nullable=False),
        sa.Column("checker2", sa.String(), nullable=False),
        sa.Column(
            "status", sa.String(length=32), nullable=False, server_default="pending"
        ),
        sa.Column("observation_status", sa.String(length=16), nullable=True),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["assigned_to"], ["app_user.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["checker1"], ["app_user.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["checker2"], ["app_user.id"], ondelete="RESTRICT"),
        sa.CheckConstraint(
            "assigned_to <> checker1 AND assigned_to <> checker2 AND checker1 <> checker2",
            name="ck_task_distinct_assignees",
        ),
    )
    op.create_index("ix_task_assigned_to", "task", ["assigned_to"])
    op.create_index("ix_task_checker1", "task", ["checker1"])
    op.create_index("ix_task_checker2", "task", ["checker2"])
    op.create_index("ix_task_status_due", "task", ["status", "due_date"])

    op.create_table(
        "task_comment",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("task_id", sa.String(), nullable=False),
        sa.Column("author_id", sa.String(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["task_id"], ["task.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["author_id"], ["app_user.id"], ondelete="RESTRICT"),
    )
    op.create_index("ix_task_comment_task_id", "task_comment", ["task_id"])

    op.create_table(
        "task_attachment",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("task_id", sa.String(), nullable=False),
        sa.Column("uploaded_by", sa.String(), nullable=False),
        sa.Column("file_name", sa.String(length=500), nullable=False),
        sa.Column("file_type", sa.String(length=200), nullable=False),
        sa.Column("file_url", sa.Text(), nullable=False),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["task_id"], ["task.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["uploaded_by"], ["app_user.id"], ondelete="RESTRICT"),
    )
    op.create_index("ix_task_attachment_task_id", "task_attachment", ["task_id"])

    op.create_table(
        "task_status_change",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("task_id", sa.String(), nullable=False),
        sa.Column("from_status", sa.String(length=32), nullable=False),
        sa.Column("to_status", sa.String(length=32), nullable=False),
        sa.Column("action", sa.String(length=32), nullable=False),
        sa.Column("actor_id", sa.String(), nullable=False),
        sa.Column("comment_id", sa.String(), nullable=True),
        sa.Column("changed_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["task_id"], ["task.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["actor_id"], ["app_user.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(
            ["comment_id"], ["task_comment.id"], ondelete="SET NULL"
        ),
    )
    op.create_index("ix_task_status_change_task_id", "task_status_change", ["task_id"])


def downgrade() -> None:
    """Downgrade schema - drop audit tracker tables."""
    op.drop_index("ix_task_status_change_task_id", "task_status_change")
    op.drop_table("task_status_change")
    op.drop_index("ix_task_attachment_task_id", "task_attachment")
    op.drop_table("task_attachment")
    op.drop_index("ix_task_comment_task_id", "task_comment")
    op.drop_table("task_comment")
    op.drop_index("ix_task_status_due", "task")
    op.drop_index("ix_task_checker2", "task")
    op.drop_index("ix_task_checker1", "task")
    op.drop_index("ix_task_assigned_to", "task")
    op.drop_table("task")
    op.drop_table("app_user")
