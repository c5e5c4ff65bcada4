"""Create todos table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `todos` table used by SqlTodoStore.
How:   Portable column types only (String, Text, Boolean, DateTime), so the
       same migration runs on PostgreSQL and SQLite.

Rollback: downgrade() drops the table (destructive, all todos are lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the todos table and its creation-order index."""
    op.create_table(
        "todos",

        # Issued by the application's UUID generator
        sa.Column(
            "id",
            sa.String(36),
            nullable=False,
            comment="Todo identifier issued by the UUID generator",
        ),

        sa.Column(
            "text",
            sa.Text(),
            nullable=False,
            comment="What needs doing",
        ),

        sa.Column(
            "completed",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
            comment="Whether the todo is done",
        ),

        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When this todo was created (UTC)",
        ),

        sa.PrimaryKeyConstraint("id"),
    )

    # GET /todos lists in creation order
    op.create_index("idx_todos_created_at", "todos", ["created_at"])


def downgrade() -> None:
    """Drop the todos table. All todo data is permanently lost."""
    op.drop_index("idx_todos_created_at", table_name="todos")
    op.drop_table("todos")
