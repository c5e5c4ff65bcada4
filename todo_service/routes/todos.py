"""
Todo Service - Todo Route Handlers
===================================

What:  HTTP handlers for the /todos resource.
How:   Decode the body with the codec, call TodoService, encode the result.
       Every handler here is registered with auth_required=True in the
       route table, so a valid bearer token has been checked before any of
       them runs.

Routes:
    GET    /todos                → 200 [Todo]
    POST   /todos                → 201 Todo
    GET    /todos/{todo_id}      → 200 Todo
    PUT    /todos/{todo_id}      → 200 Todo
    PATCH  /todos/{todo_id}      → 200 Todo
    POST   /todos/{todo_id}/toggle → 200 Todo
    DELETE /todos/{todo_id}      → 204
"""

import logging

from fastapi import Depends, Request
from starlette.responses import Response

from todo_service import codec
from todo_service.dependencies import get_todo_service, json_response
from todo_service.schemas.todo import TodoCreate, TodoUpdate
from todo_service.services.todo_service import TodoService

logger = logging.getLogger(__name__)


async def list_todos(todos: TodoService = Depends(get_todo_service)) -> Response:
    """All todos in creation order."""
    return json_response(await todos.list_todos())


async def create_todo(
    request: Request,
    todos: TodoService = Depends(get_todo_service),
) -> Response:
    """
    Create a todo from {"text": ...}.

    Responds 201 with the new record and a Location header pointing at it.
    """
    body = codec.decode(TodoCreate, await request.body())
    todo = await todos.create_todo(body.text)
    client = getattr(request.state, "client", None)
    logger.debug("Todo %s created by %s", todo.id, client.client_id if client else "unknown")
    return json_response(todo, status_code=201, headers={"Location": f"/todos/{todo.id}"})


async def get_todo(
    todo_id: str,
    todos: TodoService = Depends(get_todo_service),
) -> Response:
    return json_response(await todos.get_todo(todo_id))


async def update_todo(
    todo_id: str,
    request: Request,
    todos: TodoService = Depends(get_todo_service),
) -> Response:
    """
    Shared by PUT and PATCH: both accept {text?, completed?} and leave
    absent fields unchanged.
    """
    changes = codec.decode(TodoUpdate, await request.body())
    return json_response(await todos.update_todo(todo_id, changes))


async def toggle_todo(
    todo_id: str,
    todos: TodoService = Depends(get_todo_service),
) -> Response:
    return json_response(await todos.toggle_todo(todo_id))


async def delete_todo(
    todo_id: str,
    todos: TodoService = Depends(get_todo_service),
) -> Response:
    await todos.delete_todo(todo_id)
    return Response(status_code=204)
