"""
Todo Service - Todo Business Logic
===================================

What:  The operations behind the /todos routes: list, create, get, update,
       delete and toggle.
How:   Validates input, asks the injected UUIDGenerator for new ids and
       delegates storage to the injected TodoStore.
Who:   Called by the route handlers in routes/todos.py; holds no HTTP types.

Error Handling Strategy:
    - Business rule violations → ValidationError (400)
    - Unknown ids → NotFoundError (404)
    - Store failures propagate as StoreError (500)
"""

import logging
from typing import List

from todo_service.exceptions import NotFoundError, ValidationError
from todo_service.schemas.todo import Todo, TodoUpdate
from todo_service.services.todo_store import TodoChange, TodoStore
from todo_service.services.uuid_generator import UUIDGenerator

logger = logging.getLogger(__name__)


class TodoService:
    """
    Business logic layer for todo operations.

    Instances are created by create_app() with the store and generator of
    that application, so two apps (or two tests) never share todos.
    """

    def __init__(
        self,
        store: TodoStore,
        uuid_generator: UUIDGenerator,
        max_text_length: int = 1000,
    ):
        self.store = store
        self.uuid_generator = uuid_generator
        self.max_text_length = max_text_length

    async def list_todos(self) -> List[Todo]:
        """All todos in creation order."""
        return await self.store.list()

    async def create_todo(self, text: str) -> Todo:
        """
        Create a todo with a fresh id and completed=false.

        Raises:
            ValidationError: text is blank or too long
        """
        todo = Todo(
            id=self.uuid_generator.generate(),
            text=self._check_text(text),
            completed=False,
        )
        await self.store.add(todo)
        logger.info("Todo created: %s", todo.id)
        return todo

    async def get_todo(self, todo_id: str) -> Todo:
        """
        Raises:
            NotFoundError: no todo with this id
        """
        todo = await self.store.get(todo_id)
        if todo is None:
            raise NotFoundError(resource="todo", resource_id=todo_id)
        return todo

    async def update_todo(self, todo_id: str, changes: TodoUpdate) -> Todo:
        """
        Apply the fields present in `changes`; absent fields are kept.

        Raises:
            ValidationError: nothing to change, or the new text is invalid
            NotFoundError: no todo with this id
        """
        if changes.is_empty:
            raise ValidationError(
                message="Provide at least one of 'text' or 'completed'",
                context={"todo_id": todo_id},
            )
        update = {}
        if changes.text is not None:
            update["text"] = self._check_text(changes.text)
        if changes.completed is not None:
            update["completed"] = changes.completed

        return await self._update(todo_id, lambda todo: todo.model_copy(update=update))

    async def toggle_todo(self, todo_id: str) -> Todo:
        """Flip the completed flag. Raises NotFoundError for unknown ids."""
        return await self._update(
            todo_id, lambda todo: todo.model_copy(update={"completed": not todo.completed})
        )

    async def delete_todo(self, todo_id: str) -> None:
        """Raises NotFoundError for unknown ids."""
        if not await self.store.remove(todo_id):
            raise NotFoundError(resource="todo", resource_id=todo_id)
        logger.info("Todo deleted: %s", todo_id)

    async def _update(self, todo_id: str, change: TodoChange) -> Todo:
        updated = await self.store.update(todo_id, change)
        if updated is None:
            raise NotFoundError(resource="todo", resource_id=todo_id)
        return updated

    def _check_text(self, text: str) -> str:
        """Text is stored exactly as given once it passes these checks."""
        if not text.strip():
            raise ValidationError(message="Todo text must not be blank", field="text")
        if len(text) > self.max_text_length:
            raise ValidationError(
                message=f"Todo text must be at most {self.max_text_length} characters",
                field="text",
                context={"length": len(text)},
            )
        return text
