"""Add todos.priority and backfill existing rows.

Revision ID: 002_backfill_todo_priority
Revises: 001_users_todos
Create Date: 2026-10-19

Rows created before priority existed get 'medium' here, once, instead of
being patched whenever a client happens to read them.

Steps:
1. Add priority as nullable
2. Backfill NULL -> 'medium'
3. Make it NOT NULL with a default and a CHECK constraint
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy import text

revision: str = "002_backfill_todo_priority"
down_revision: str | None = "001_users_todos"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.add_column("todos", sa.Column("priority", sa.String(10), nullable=True))

    op.execute(
        text(
            """
            UPDATE todos
            SET priority = 'medium'
            WHERE priority IS NULL
            """
        )
    )

    # batch mode so the ALTER also works on SQLite
    with op.batch_alter_table("todos") as batch_op:
        batch_op.alter_column(
            "priority",
            existing_type=sa.String(10),
            nullable=False,
            server_default=sa.text("'medium'"),
        )
        batch_op.create_check_constraint(
            "ck_todos_priority_valid",
            "priority IN ('low', 'medium', 'high')",
        )


def downgrade() -> None:
    with op.batch_alter_table("todos") as batch_op:
        batch_op.drop_constraint("ck_todos_priority_valid", type_="check")
        batch_op.drop_column("priority")
