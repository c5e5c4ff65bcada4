"""
Todo Service - Token Exchange Route
====================================

What:  POST /auth exchanges client credentials for a bearer token.
How:   Decodes Credentials, calls AuthService.authenticate() and returns
       the OAuthToken. After the response is sent, a background task looks
       up where the request came from and logs it.

Responses:
    200 OAuthToken     credentials accepted
    400 OAuthError     body is not valid Credentials JSON (decode_error)
    401 OAuthError     unknown client or wrong secret (invalid_client)
"""

import logging
from typing import Optional

from fastapi import BackgroundTasks, Depends, Request
from starlette.responses import Response

from todo_service import codec
from todo_service.dependencies import get_auth_service, get_ip_lookup, json_response
from todo_service.schemas.auth import Credentials
from todo_service.services.auth_service import AuthService
from todo_service.services.ip_lookup import IPLookupService, client_ip

logger = logging.getLogger(__name__)


async def issue_token(
    request: Request,
    background_tasks: BackgroundTasks,
    auth: AuthService = Depends(get_auth_service),
    ip_lookup: IPLookupService = Depends(get_ip_lookup),
) -> Response:
    credentials = codec.decode(Credentials, await request.body())
    token = await auth.authenticate(credentials)

    background_tasks.add_task(log_token_origin, ip_lookup, client_ip(request), token.client_id)

    # Tokens must not be cached by intermediaries
    return json_response(token, headers={"Cache-Control": "no-store", "Pragma": "no-cache"})


async def log_token_origin(
    ip_lookup: IPLookupService, ip: Optional[str], client_id: str
) -> None:
    """Background task: record where a token request came from."""
    info = await ip_lookup.lookup(ip)
    if info is None:
        logger.info("Token for '%s' requested from %s", client_id, ip or "unknown")
        return
    logger.info(
        "Token for '%s' requested from %s (%s, %s, %s)",
        client_id,
        ip,
        info.city or "?",
        info.country or "?",
        info.org or "?",
    )
