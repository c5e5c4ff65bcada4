"""
Todo Service - Request Dependencies
====================================

What:  FastAPI dependencies that hand route handlers the services owned by
       their application instance, plus the bearer-token guard.
How:   create_app() stores one AppServices on app.state; the getters below
       read it back from the request. No service is a module-level global.

Auth Flow (protected routes):
    Authorization: Bearer <token>
        → parse_bearer() → AuthService.authorize()
        → ClientIdentity on request.state.client
        → handler runs
    Any failure raises UnauthorizedError, rendered as 401 + OAuthError.
"""

import time
from typing import Mapping, Optional, Sequence, Union

from fastapi import Depends, Header, Request
from pydantic import BaseModel
from starlette.responses import Response

from todo_service import codec
from todo_service.schemas.auth import ClientIdentity
from todo_service.services.auth_service import AuthService, parse_bearer
from todo_service.services.ip_lookup import IPLookupService
from todo_service.services.todo_service import TodoService
from todo_service.services.todo_store import TodoStore


class AppServices:
    """Everything one application instance owns."""

    def __init__(
        self,
        store: TodoStore,
        todos: TodoService,
        auth: AuthService,
        ip_lookup: IPLookupService,
    ):
        self.store = store
        self.todos = todos
        self.auth = auth
        self.ip_lookup = ip_lookup
        self.started_at = time.time()


def get_services(request: Request) -> AppServices:
    return request.app.state.services


def get_todo_service(services: AppServices = Depends(get_services)) -> TodoService:
    return services.todos


def get_auth_service(services: AppServices = Depends(get_services)) -> AuthService:
    return services.auth


def get_ip_lookup(services: AppServices = Depends(get_services)) -> IPLookupService:
    return services.ip_lookup


async def require_client(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    auth: AuthService = Depends(get_auth_service),
) -> ClientIdentity:
    """
    Guard attached by the route table to every route with auth_required.

    Raises:
        UnauthorizedError: missing, malformed or unknown bearer token
    """
    identity = await auth.authorize(parse_bearer(authorization))
    request.state.client = identity
    return identity


def json_response(
    value: Union[BaseModel, Sequence[BaseModel]],
    status_code: int = 200,
    headers: Optional[Mapping[str, str]] = None,
) -> Response:
    """Response whose body is produced by the JSON codec."""
    return Response(
        content=codec.encode(value),
        status_code=status_code,
        headers=dict(headers) if headers else None,
        media_type="application/json",
    )
