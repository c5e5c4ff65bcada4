"""
Todo Service - Request Logging Middleware
==========================================

What:  One structured access log line for every HTTP request.
How:   Measures the time spent in the rest of the stack and logs method,
       path, status, duration, request ID and client IP. The level follows
       the status class: 5xx → ERROR, 4xx → WARNING, else INFO.
When:  Runs inside RequestIDMiddleware, so the request ID is available.

Never logged: request bodies (they carry client secrets) and the
Authorization header.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from todo_service.middleware.request_id import request_id_var

logger = logging.getLogger("todo_service.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status and duration of each request."""

    # Probes hit these constantly
    QUIET_PATHS = {"/health"}

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()

        client_ip = getattr(request.client, "host", "unknown") if request.client else "unknown"
        method = request.method
        path = request.url.path
        rid = request_id_var.get("")

        if path in self.QUIET_PATHS:
            return await call_next(request)

        try:
            response = await call_next(request)
        except Exception:
            # Rendered as a 500 by RequestIDMiddleware
            self._log(method, path, 500, start_time, rid, client_ip)
            raise

        self._log(method, path, response.status_code, start_time, rid, client_ip)
        return response

    @staticmethod
    def _log(
        method: str, path: str, status: int, start_time: float, rid: str, client_ip: str
    ) -> None:
        duration_ms = (time.perf_counter() - start_time) * 1000

        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
