"""
Todo Service - Todo Schemas
============================

What:  Pydantic models defining the Todo API contract.
How:   The codec decodes request bodies into TodoCreate / TodoUpdate and
       encodes Todo records into response bodies.

Example:
    POST /todos {"text": "buy milk"}
    → 201 {"id": "3f0e...", "text": "buy milk", "completed": false}
"""

from typing import Optional

from pydantic import Field

from todo_service.schemas.base import WireModel


class Todo(WireModel):
    """
    What:  A task record with text and completion state.
    Who:   Returned by every /todos endpoint; stored by TodoStore.

    Identity is `id`; it never changes after creation. Instances are
    frozen, so updates produce a new record via model_copy().
    """

    id: str = Field(description="Unique todo identifier (UUID string)")
    text: str = Field(description="What needs doing")
    completed: bool = Field(description="Whether the todo is done")


class TodoCreate(WireModel):
    """Body of POST /todos."""

    text: str = Field(description="Text of the new todo")


class TodoUpdate(WireModel):
    """
    Body of PUT and PATCH /todos/{id}.

    Both fields are optional; an absent (or null) field keeps its current
    value. TodoService rejects a body that changes nothing.
    """

    text: Optional[str] = Field(default=None, description="Replacement text")
    completed: Optional[bool] = Field(default=None, description="New completion state")

    @property
    def is_empty(self) -> bool:
        return self.text is None and self.completed is None
