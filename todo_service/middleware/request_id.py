"""
Todo Service - Request ID Middleware
=====================================

What:  Assigns an ID to each incoming request and returns it in the response.
How:   Reuses a client-supplied X-Request-ID or generates a short one, stores
       it in a ContextVar and on request.state, and sets the response header.
Who:   Applied to every request; read by the access logger and by the
       exception handlers when they log an error.

Unhandled Errors:
    Exceptions no handler claimed are caught here, logged with their stack
    trace and rendered as a 500 `server_error` OAuthError, so that response
    carries the request ID too.
"""

import logging
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from todo_service import codec
from todo_service.schemas.auth import OAuthError

logger = logging.getLogger(__name__)

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Behavior:
        1. Use the client's X-Request-ID header if present
        2. Otherwise generate the first 8 characters of a uuid4
        3. Store in ContextVar and request.state
        4. Add to response headers, including generic 500 responses
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error("[%s] Unexpected error: %s", rid, str(e), exc_info=True)
            response = Response(
                content=codec.encode(
                    OAuthError(code="server_error", description="An unexpected error occurred.")
                ),
                status_code=500,
                media_type="application/json",
            )

        response.headers["X-Request-ID"] = rid
        return response
