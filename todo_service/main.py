"""
Todo Service - FastAPI Application Factory
===========================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() builds the services one instance owns (store, token
       store, UUID generator, IP lookup), registers middleware, exception
       handlers and the route table, and returns the app.
Who:   uvicorn (`uvicorn todo_service.main:create_app --factory`), the
       `todo-service` console script and the test suite.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware:  Request ID → Logging → GZip → CORS    │
    │                                                     │
    │  Route table: /todos*  (bearer token required)      │
    │               /auth, /, /health, /ip                │
    │                                                     │
    │  Exception handlers → OAuthError JSON bodies        │
    │    400 validation_error | decode_error              │
    │    401 invalid_request | invalid_token | ..._client │
    │    404 not_found        500 server_error            │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → configuration check → store.startup()
    Shutdown: store.shutdown() (disposes the engine for the SQL store)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from todo_service import __version__
from todo_service.config import Settings, settings as default_settings
from todo_service.database import create_engine
from todo_service.dependencies import AppServices, json_response
from todo_service.exceptions import TodoServiceError, UnauthorizedError
from todo_service.middleware.logging import RequestLoggingMiddleware
from todo_service.middleware.request_id import RequestIDMiddleware, request_id_var
from todo_service.routes import ROUTE_TABLE, build_router
from todo_service.schemas.auth import OAuthError
from todo_service.services.auth_service import AuthService
from todo_service.services.ip_lookup import IPLookupService
from todo_service.services.todo_service import TodoService
from todo_service.services.todo_store import InMemoryTodoStore, SqlTodoStore, TodoStore
from todo_service.services.uuid_generator import SimpleUUIDGenerator, UUIDGenerator

logger = logging.getLogger(__name__)

REALM = "todo-service"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: 2026-10-19T12:00:00 [INFO] todo_service.access: GET /todos 200 ...
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Service Wiring
# ══════════════════════════════════════════════════════════════════════════

def build_store(settings: Settings) -> TodoStore:
    """The TodoStore selected by STORE_BACKEND."""
    if settings.store_backend == "database":
        return SqlTodoStore(create_engine(settings), create_tables=settings.db_create_tables)
    return InMemoryTodoStore()


def build_services(
    settings: Settings,
    store: Optional[TodoStore] = None,
    uuid_generator: Optional[UUIDGenerator] = None,
    ip_lookup: Optional[IPLookupService] = None,
) -> AppServices:
    """
    Assemble the services one application instance owns.

    Any argument left as None gets the production default.
    """
    store = store if store is not None else build_store(settings)
    uuid_generator = uuid_generator if uuid_generator is not None else SimpleUUIDGenerator()
    if ip_lookup is None:
        ip_lookup = IPLookupService(
            url_template=settings.ip_lookup_url,
            timeout=settings.ip_lookup_timeout,
            enabled=settings.ip_lookup_enabled,
        )
    return AppServices(
        store=store,
        todos=TodoService(store, uuid_generator, max_text_length=settings.max_todo_text_length),
        auth=AuthService(settings.oauth_clients_map, uuid_generator),
        ip_lookup=ip_lookup,
    )


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

def make_lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        # ── Startup ───────────────────────────────────────────────────────
        setup_logging(settings.log_level)
        logger.info("Todo Service %s starting up...", __version__)

        try:
            settings.validate_required_for_production()
        except ValueError as e:
            # Keep serving: /health and /ip still work without clients
            logger.error("Configuration error: %s", str(e))

        services: AppServices = app.state.services
        await services.store.startup()
        logger.info("Store backend: %s", services.store.name)
        logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

        yield

        # ── Shutdown ──────────────────────────────────────────────────────
        logger.info("Todo Service shutting down...")
        await services.store.shutdown()
        logger.info("Shutdown complete.")

    return lifespan


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(
    status_code: int, code: str, description: str, headers: Optional[dict] = None
) -> Response:
    return json_response(
        OAuthError(code=code, description=description),
        status_code=status_code,
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to OAuthError JSON bodies with the matching status.

    Internal details (context dicts, stack traces) are logged, never
    returned to the client.
    """

    @app.exception_handler(UnauthorizedError)
    async def handle_unauthorized(request: Request, exc: UnauthorizedError):
        rid = request_id_var.get("")
        logger.warning("[%s] Unauthorized (%s): %s", rid, exc.code, exc.message)
        challenge = f'Bearer realm="{REALM}"'
        if exc.code in ("invalid_token", "invalid_request"):
            challenge += f', error="{exc.code}"'
        return error_response(
            exc.status_code, exc.code, exc.message, headers={"WWW-Authenticate": challenge}
        )

    @app.exception_handler(TodoServiceError)
    async def handle_service_error(request: Request, exc: TodoServiceError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
            return error_response(
                exc.status_code, exc.code, "An internal error occurred. Please try again later."
            )
        logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return error_response(exc.status_code, exc.code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Path, query and header parameters FastAPI could not bind."""
        rid = request_id_var.get("")
        errors = exc.errors()
        first = errors[0] if errors else {"loc": (), "msg": "Invalid request"}
        location = ".".join(str(part) for part in first.get("loc", ()))
        logger.warning("[%s] Request validation error at %s", rid, location)
        return error_response(400, "validation_error", f"{location}: {first.get('msg')}")

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        """Unknown paths and unsupported methods, in the same error format."""
        codes = {404: "not_found", 405: "method_not_allowed"}
        return error_response(
            exc.status_code,
            codes.get(exc.status_code, "http_error"),
            str(exc.detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Last resort for errors raised outside RequestIDMiddleware."""
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return error_response(500, "server_error", "An unexpected error occurred.")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    *,
    store: Optional[TodoStore] = None,
    uuid_generator: Optional[UUIDGenerator] = None,
    ip_lookup: Optional[IPLookupService] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Every call returns an independent app with its own store and tokens.
    Tests pass a SequentialUUIDGenerator and a stubbed IPLookupService.
    """
    settings = settings if settings is not None else default_settings

    app = FastAPI(
        title="Todo Service",
        description="CRUD over todo items, protected by OAuth-style bearer tokens.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=make_lifespan(settings),
    )
    app.state.settings = settings
    app.state.services = build_services(settings, store, uuid_generator, ip_lookup)
    app.state.route_table = ROUTE_TABLE

    # ── Middleware (last added runs first) ────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Location", "WWW-Authenticate"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)
    app.include_router(build_router(ROUTE_TABLE))

    return app


def run() -> None:
    """Console entry point: serve create_app() with uvicorn."""
    import uvicorn

    uvicorn.run(
        "todo_service.main:create_app",
        factory=True,
        host=default_settings.backend_host,
        port=default_settings.backend_port,
        log_level=default_settings.log_level.lower(),
    )
