"""
Todo Service - Todo Stores
===========================

What:  The collection that owns every Todo, keyed by id.
How:   TodoStore is an abstract interface; create_app() builds one concrete
       store per application instance and injects it into TodoService.
       Nothing here lives at module level.

Implementations:
    - InMemoryTodoStore: insertion-ordered dict behind an asyncio.Lock.
      Reads and writes are serialized.
    - SqlTodoStore: async SQLAlchemy, one session (and transaction) per
      operation. update() locks the row with SELECT ... FOR UPDATE and
      also holds a per-store asyncio.Lock, since SQLite ignores row locks.

Contract:
    - add() requires a fresh id; a duplicate raises StoreError
    - update(todo_id, change) reads, applies `change` and writes back as one
      exclusive step, so concurrent updates of one todo never lose a change
    - get() / update() / remove() return None or False for unknown ids;
      turning that into NotFoundError is TodoService's job
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional

from sqlalchemy import delete, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from todo_service.database import Base, create_session_factory
from todo_service.exceptions import StoreError
from todo_service.models.todo import TodoRecord
from todo_service.schemas.todo import Todo

logger = logging.getLogger(__name__)

TodoChange = Callable[[Todo], Todo]


class TodoStore(ABC):
    """Abstract todo collection. All methods are coroutines."""

    name = "abstract"

    async def startup(self) -> None:
        """Prepare the store. Called from the application lifespan."""

    async def shutdown(self) -> None:
        """Release resources. Called from the application lifespan."""

    async def ping(self) -> bool:
        """True when the store can serve requests. Used by GET /health."""
        return True

    @abstractmethod
    async def list(self) -> List[Todo]:
        """All todos in creation order."""
        ...

    @abstractmethod
    async def add(self, todo: Todo) -> Todo:
        ...

    @abstractmethod
    async def get(self, todo_id: str) -> Optional[Todo]:
        ...

    @abstractmethod
    async def update(self, todo_id: str, change: TodoChange) -> Optional[Todo]:
        """
        Replace the todo with `change(current)` and return the result.

        No other write to the store can happen between the read and the
        write. None if there is no todo with this id.
        """
        ...

    @abstractmethod
    async def remove(self, todo_id: str) -> bool:
        """Delete by id. False if nothing was deleted."""
        ...


class InMemoryTodoStore(TodoStore):
    """Process-local store. Contents are lost when the process exits."""

    name = "memory"

    def __init__(self) -> None:
        self._todos: Dict[str, Todo] = {}
        self._lock = asyncio.Lock()

    async def list(self) -> List[Todo]:
        async with self._lock:
            return list(self._todos.values())

    async def add(self, todo: Todo) -> Todo:
        async with self._lock:
            if todo.id in self._todos:
                raise StoreError(context={"todo_id": todo.id, "reason": "duplicate id"})
            self._todos[todo.id] = todo
            return todo

    async def get(self, todo_id: str) -> Optional[Todo]:
        async with self._lock:
            return self._todos.get(todo_id)

    async def update(self, todo_id: str, change: TodoChange) -> Optional[Todo]:
        async with self._lock:
            current = self._todos.get(todo_id)
            if current is None:
                return None
            updated = change(current)
            self._todos[todo_id] = updated
            return updated

    async def remove(self, todo_id: str) -> bool:
        async with self._lock:
            return self._todos.pop(todo_id, None) is not None


class SqlTodoStore(TodoStore):
    """
    Store backed by the `todos` table.

    Every SQLAlchemy failure is logged with its type and re-raised as
    StoreError, so handlers never see driver exceptions.
    """

    name = "database"

    def __init__(self, engine: AsyncEngine, create_tables: bool = False) -> None:
        self._engine = engine
        self._session_factory = create_session_factory(engine)
        self._create_tables = create_tables
        # Serializes writes from this process; FOR UPDATE covers other processes
        self._write_lock = asyncio.Lock()

    async def startup(self) -> None:
        if self._create_tables:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Created missing database tables")

    async def shutdown(self) -> None:
        await self._engine.dispose()

    async def ping(self) -> bool:
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning("Database ping failed: %s", str(e))
            return False

    async def list(self) -> List[Todo]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(TodoRecord).order_by(TodoRecord.created_at, TodoRecord.id)
                )
                return [record.to_schema() for record in result.scalars().all()]
        except SQLAlchemyError as e:
            raise self._store_error("list", e)

    async def add(self, todo: Todo) -> Todo:
        try:
            async with self._write_lock, self._session_factory() as session:
                async with session.begin():
                    session.add(TodoRecord.from_schema(todo))
            return todo
        except SQLAlchemyError as e:
            raise self._store_error("add", e, todo_id=todo.id)

    async def get(self, todo_id: str) -> Optional[Todo]:
        try:
            async with self._session_factory() as session:
                record = await session.get(TodoRecord, todo_id)
                return record.to_schema() if record is not None else None
        except SQLAlchemyError as e:
            raise self._store_error("get", e, todo_id=todo_id)

    async def update(self, todo_id: str, change: TodoChange) -> Optional[Todo]:
        try:
            async with self._write_lock, self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(
                        select(TodoRecord).where(TodoRecord.id == todo_id).with_for_update()
                    )
                    record = result.scalar_one_or_none()
                    if record is None:
                        return None
                    updated = change(record.to_schema())
                    record.text = updated.text
                    record.completed = updated.completed
            return updated
        except SQLAlchemyError as e:
            raise self._store_error("update", e, todo_id=todo_id)

    async def remove(self, todo_id: str) -> bool:
        try:
            async with self._write_lock, self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(
                        delete(TodoRecord).where(TodoRecord.id == todo_id)
                    )
            return result.rowcount > 0
        except SQLAlchemyError as e:
            raise self._store_error("remove", e, todo_id=todo_id)

    @staticmethod
    def _store_error(operation: str, error: Exception, **context) -> StoreError:
        logger.error("Database error during %s: %s", operation, str(error))
        return StoreError(
            context={"operation": operation, "error_type": type(error).__name__, **context}
        )
