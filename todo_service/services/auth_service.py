"""
Todo Service - Authentication and Authorization
================================================

What:  Issues opaque bearer tokens to registered clients and resolves
       presented tokens back to the client they were issued for.
How:   authenticate() checks credentials against the configured clients,
       mints a token with the injected UUIDGenerator and records it in a
       TokenStore. authorize() looks the token up.
Who:   POST /auth calls authenticate(); the require_client dependency calls
       authorize() for every protected route.

Token Lifecycle:
    Issue and validate only. Tokens do not expire and cannot be revoked;
    they live as long as the application instance.
"""

import asyncio
import hmac
import logging
from datetime import datetime, timezone
from typing import Dict, Mapping, Optional

from todo_service.exceptions import UnauthorizedError
from todo_service.schemas.auth import ClientIdentity, Credentials, OAuthToken
from todo_service.services.uuid_generator import UUIDGenerator

logger = logging.getLogger(__name__)


class TokenStore:
    """In-memory map of token string → OAuthToken, guarded by an asyncio.Lock."""

    def __init__(self) -> None:
        self._tokens: Dict[str, OAuthToken] = {}
        self._lock = asyncio.Lock()

    async def save(self, token: OAuthToken) -> None:
        async with self._lock:
            self._tokens[token.token] = token

    async def find(self, token: str) -> Optional[OAuthToken]:
        async with self._lock:
            return self._tokens.get(token)


class AuthService:
    """
    Token issuing and validation.

    Args:
        clients: {client_id: client_secret} of every registered client
        uuid_generator: source of token values
        token_store: where issued tokens are kept (a fresh one by default)
    """

    def __init__(
        self,
        clients: Mapping[str, str],
        uuid_generator: UUIDGenerator,
        token_store: Optional[TokenStore] = None,
    ):
        self._clients = dict(clients)
        self.uuid_generator = uuid_generator
        self.token_store = token_store if token_store is not None else TokenStore()

    async def authenticate(self, credentials: Credentials) -> OAuthToken:
        """
        Exchange client credentials for a new token.

        Raises:
            UnauthorizedError(code="invalid_client"): unknown client or
                wrong secret. Both cases get the same message so callers
                cannot probe for valid client ids.
        """
        expected = self._clients.get(credentials.client_id)
        # Compared even for unknown clients
        secret_ok = hmac.compare_digest(
            (expected or "").encode("utf-8"),
            credentials.client_secret.encode("utf-8"),
        )
        if expected is None or not secret_ok:
            logger.warning("Rejected credentials for client '%s'", credentials.client_id)
            raise UnauthorizedError(
                message="Client authentication failed",
                code="invalid_client",
                context={"client_id": credentials.client_id},
            )

        token = OAuthToken(
            token=self.uuid_generator.generate(),
            client_id=credentials.client_id,
            issued_at=datetime.now(timezone.utc),
        )
        await self.token_store.save(token)
        logger.info("Issued token to client '%s'", token.client_id)
        return token

    async def authorize(self, token: Optional[str]) -> ClientIdentity:
        """
        Resolve a presented token to the client it was issued for.

        Raises:
            UnauthorizedError(code="invalid_request"): no token presented
            UnauthorizedError(code="invalid_token"): token was never issued
        """
        if not token:
            raise UnauthorizedError(
                message="Missing bearer token in Authorization header",
                code="invalid_request",
            )
        issued = await self.token_store.find(token)
        if issued is None:
            raise UnauthorizedError(
                message="The access token is invalid",
                code="invalid_token",
            )
        return ClientIdentity(client_id=issued.client_id)


def parse_bearer(authorization: Optional[str]) -> Optional[str]:
    """
    Extract the token from an `Authorization: Bearer <token>` header value.

    The scheme is case-insensitive. Returns None for a missing header, a
    different scheme or an empty token.
    """
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None
