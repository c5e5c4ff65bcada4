"""
Todo Service - Authentication Schemas
======================================

What:  Wire records for the token exchange and for auth failures.

    Credentials   ← body of POST /auth
    OAuthToken    → 200 response of POST /auth
    OAuthError    → body of every error response (401, 400, 404, 500)
    ClientIdentity   the client a validated token belongs to (internal)
"""

from datetime import datetime

from pydantic import Field

from todo_service.schemas.base import WireModel


class Credentials(WireModel):
    """
    Client credentials presented to POST /auth.

    Example:
        {"clientId": "todo-web", "clientSecret": "todo-web-secret"}
    """

    client_id: str = Field(description="Registered client identifier")
    client_secret: str = Field(description="Shared secret for the client")


class OAuthToken(WireModel):
    """
    Opaque bearer credential granting access to protected routes.

    Example:
        {"token": "9b1d...", "clientId": "todo-web",
         "issuedAt": "2026-10-19T12:00:00Z"}
    """

    token: str = Field(description="Opaque bearer token")
    client_id: str = Field(description="Client the token was issued to")
    issued_at: datetime = Field(description="When the token was issued (UTC)")


class OAuthError(WireModel):
    """
    Structured description of a failure.

    `code` is machine-readable (invalid_token, not_found, ...);
    `description` is meant for humans.
    """

    code: str = Field(description="Machine-readable error code")
    description: str = Field(description="Human-readable error description")


class ClientIdentity(WireModel):
    """Identity attached to request.state.client once a token is authorized."""

    client_id: str
