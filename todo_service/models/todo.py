"""
Todo Service - Todo SQLAlchemy Model
=====================================

What:  ORM model representing the `todos` table.
Who:   SqlTodoStore for CRUD; Alembic for schema management.

Table Design:
    - id: String(36) primary key holding the generated UUID string. Ids
      come from the injected UUIDGenerator, not from the database.
    - text: TEXT, length is enforced by TodoService
    - completed: BOOLEAN, defaults to false
    - created_at: UTC timestamp, gives the list its stable creation order
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Index, String, Text, false, func
from sqlalchemy.orm import Mapped, mapped_column

from todo_service.database import Base
from todo_service.schemas.todo import Todo


class TodoRecord(Base):
    """
    A persisted todo row.

    Lifecycle:
        1. Inserted on POST /todos (completed = false)
        2. Updated on PUT / PATCH / toggle
        3. Deleted on DELETE /todos/{id}
    """

    __tablename__ = "todos"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        comment="Todo identifier issued by the UUID generator",
    )

    text: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="What needs doing",
    )

    completed: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
        comment="Whether the todo is done",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        comment="When this todo was created (UTC)",
    )

    __table_args__ = (
        Index("idx_todos_created_at", "created_at"),
    )

    @classmethod
    def from_schema(cls, todo: Todo) -> "TodoRecord":
        return cls(id=todo.id, text=todo.text, completed=todo.completed)

    def to_schema(self) -> Todo:
        return Todo(id=self.id, text=self.text, completed=self.completed)

    def __repr__(self) -> str:
        return f"<TodoRecord(id={self.id}, completed={self.completed})>"
