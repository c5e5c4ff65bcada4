"""
Todo Service - Route Table
===========================

What:  The explicit list of every route the service serves, and the
       function that turns it into a FastAPI router.
How:   Each Route names its method, path, handler and whether a bearer
       token is required. build_router() registers them in order, adding
       the require_client guard where auth_required is set. create_app()
       calls it once at startup and keeps the table on app.state so GET /
       can describe it.

Handlers stay thin: decode, call a service, encode. Business rules live
in services.
"""

from typing import Any, Callable, Dict, List, NamedTuple, Optional, Sequence, Type

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from todo_service.dependencies import require_client
from todo_service.routes import auth, health, todos
from todo_service.schemas.auth import Credentials, OAuthError, OAuthToken
from todo_service.schemas.service import HealthResponse, IPLookupResponse, ServiceInfo
from todo_service.schemas.todo import Todo, TodoCreate, TodoUpdate


class Route(NamedTuple):
    method: str
    path: str
    handler: Callable[..., Any]
    auth_required: bool
    status_code: int = 200
    summary: str = ""
    body: Optional[Type[BaseModel]] = None
    response_model: Any = None
    tags: Sequence[str] = ()


ROUTE_TABLE: Sequence[Route] = (
    Route("GET", "/todos", todos.list_todos, True,
          summary="List todos", response_model=List[Todo], tags=["Todos"]),
    Route("POST", "/todos", todos.create_todo, True, status_code=201,
          summary="Create a todo", body=TodoCreate, response_model=Todo, tags=["Todos"]),
    Route("GET", "/todos/{todo_id}", todos.get_todo, True,
          summary="Get a todo", response_model=Todo, tags=["Todos"]),
    Route("PUT", "/todos/{todo_id}", todos.update_todo, True,
          summary="Update a todo", body=TodoUpdate, response_model=Todo, tags=["Todos"]),
    Route("PATCH", "/todos/{todo_id}", todos.update_todo, True,
          summary="Partially update a todo", body=TodoUpdate, response_model=Todo, tags=["Todos"]),
    Route("POST", "/todos/{todo_id}/toggle", todos.toggle_todo, True,
          summary="Toggle completion", response_model=Todo, tags=["Todos"]),
    Route("DELETE", "/todos/{todo_id}", todos.delete_todo, True, status_code=204,
          summary="Delete a todo", tags=["Todos"]),
    Route("POST", "/auth", auth.issue_token, False,
          summary="Exchange client credentials for a token", body=Credentials,
          response_model=OAuthToken, tags=["Auth"]),
    Route("GET", "/", health.index, False,
          summary="Service index", response_model=ServiceInfo, tags=["Service"]),
    Route("GET", "/health", health.health_check, False,
          summary="Service health check", response_model=HealthResponse, tags=["Service"]),
    Route("GET", "/ip", health.lookup_ip, False,
          summary="Look up the caller's IP address", response_model=IPLookupResponse,
          tags=["Service"]),
)


def _error_responses(route: Route) -> Dict[int, Dict[str, Any]]:
    responses: Dict[int, Dict[str, Any]] = {}
    if route.body is not None:
        responses[400] = {"description": "Malformed or invalid body", "model": OAuthError}
    if route.auth_required or route.path == "/auth":
        responses[401] = {"description": "Missing or invalid credentials", "model": OAuthError}
    if "{todo_id}" in route.path:
        responses[404] = {"description": "Todo not found", "model": OAuthError}
    return responses


def build_router(routes: Sequence[Route] = ROUTE_TABLE) -> APIRouter:
    """Register every route in `routes` on a fresh APIRouter."""
    router = APIRouter()
    for route in routes:
        openapi_extra = None
        if route.body is not None:
            # Bodies are read raw and decoded by the codec, so the schema
            # has to be declared by hand
            openapi_extra = {
                "requestBody": {
                    "required": True,
                    "content": {
                        "application/json": {
                            "schema": route.body.model_json_schema(by_alias=True)
                        }
                    },
                }
            }
        router.add_api_route(
            route.path,
            route.handler,
            methods=[route.method],
            status_code=route.status_code,
            response_model=route.response_model,
            dependencies=[Depends(require_client)] if route.auth_required else None,
            summary=route.summary or None,
            tags=list(route.tags),
            responses=_error_responses(route),
            openapi_extra=openapi_extra,
            name=f"{route.method.lower()} {route.path}",
        )
    return router
