"""add task parent_task_id for recurring series

Revision ID: c3f8a1d5e7b2
Revises: a1c4e7f20b3d
Create Date: 2026-10-19 14:03:27.911402

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "c3f8a1d5e7b2"
down_revision: Union[str, Sequence[str], None] = "a1c4e7f20b3d"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.add_column("task", sa.Column("parent_task_id", sa.String(), nullable=True))
    op.create_foreign_key(
        "fk_task_parent_task_id",
        "task",
        "task",
        ["parent_task_id"],
        ["id"],
        ondelete="SET NULL",
    )
    op.create_index("ix_task_parent_task_id", "task", ["parent_task_id"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_task_parent_task_id", table_name="task")
    op.drop_constraint("fk_task_parent_task_id", "task", type_="foreignkey")
    op.drop_column("task", "parent_task_id")
