"""
Todo Service - Service Information Routes
==========================================

What:  Unauthenticated informational endpoints.

    GET /        → ServiceInfo: name, version and the route table
    GET /health  → HealthResponse: overall status and store reachability
    GET /ip      → IPLookupResponse: the caller's origin address and,
                   when the lookup succeeds, what is known about it

Health Status:
    - healthy:   store reachable (HTTP 200)
    - unhealthy: store unreachable (HTTP 503)
"""

import logging
import time

from fastapi import Depends, Request
from starlette.responses import JSONResponse

from todo_service import __version__
from todo_service.dependencies import AppServices, get_ip_lookup, get_services
from todo_service.schemas.service import (
    HealthResponse,
    IPLookupResponse,
    RouteInfo,
    ServiceInfo,
)
from todo_service.services.ip_lookup import IPLookupService, client_ip

logger = logging.getLogger(__name__)


async def index(request: Request) -> ServiceInfo:
    """Describe the service and every route it serves."""
    return ServiceInfo(
        name=request.app.title,
        version=__version__,
        routes=[
            RouteInfo(method=route.method, path=route.path, auth_required=route.auth_required)
            for route in request.app.state.route_table
        ],
    )


async def health_check(services: AppServices = Depends(get_services)):
    """
    Check the store with a lightweight ping.

    Returns 200 with status=healthy, or 503 with status=unhealthy so load
    balancers stop routing to this instance.
    """
    store_ok = await services.store.ping()
    if not store_ok:
        logger.warning("Health check: %s store unreachable", services.store.name)

    health = HealthResponse(
        status="healthy" if store_ok else "unhealthy",
        version=__version__,
        store=f"{services.store.name}:{'ok' if store_ok else 'unreachable'}",
        uptime_seconds=round(time.time() - services.started_at, 2),
    )
    if not store_ok:
        return JSONResponse(status_code=503, content=health.model_dump())
    return health


async def lookup_ip(
    request: Request,
    ip_lookup: IPLookupService = Depends(get_ip_lookup),
) -> IPLookupResponse:
    """Best effort: `info` is null whenever the lookup is unavailable."""
    ip = client_ip(request)
    return IPLookupResponse(ip=ip, info=await ip_lookup.lookup(ip))
