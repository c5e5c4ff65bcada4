"""
Todo Service - Custom Exception Hierarchy
==========================================

What:  Application-specific exceptions for each error scenario.
How:   Each exception carries a message, an optional context dict and the
       OAuthError `code` it is rendered with. Global exception handlers
       (registered in main.py) turn them into JSON OAuthError bodies with
       the matching HTTP status code.
Who:   Raised by services, the codec and the auth dependency.

Exception Hierarchy:
    TodoServiceError (base)
    ├── ValidationError     → 400 validation_error
    ├── DecodeError         → 400 decode_error
    ├── UnauthorizedError   → 401 invalid_request | invalid_token | invalid_client
    ├── NotFoundError       → 404 not_found
    └── StoreError          → 500 server_error
"""

from typing import Any, Dict, Optional


class TodoServiceError(Exception):
    """
    Base exception for all Todo Service errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
        code:     OAuthError code used in the response body
        status_code: HTTP status the global handler responds with
    """

    code = "server_error"
    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(TodoServiceError):
    """
    Raised when decoded client input breaks a business rule.

    When:  Empty todo text, text over the configured length, an update body
           with no fields to change.
    HTTP:  400 Bad Request
    """

    code = "validation_error"
    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class DecodeError(TodoServiceError):
    """
    Raised by the JSON codec when text cannot be mapped onto a record.

    When:  Invalid JSON, missing required fields, wrong field types,
           unknown fields.
    HTTP:  400 Bad Request

    `errors` holds pydantic's per-field error list (without input values)
    so the caller can log what was wrong.
    """

    code = "decode_error"
    status_code = 400

    def __init__(
        self,
        message: str = "Request body is not valid JSON for this resource",
        errors: Optional[list] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        self.errors = errors or []
        if self.errors:
            ctx["errors"] = self.errors
        super().__init__(message=message, context=ctx)


class UnauthorizedError(TodoServiceError):
    """
    Raised when a request lacks a valid token or presents bad credentials.

    Codes:
        invalid_request: no Authorization header, or not a Bearer header
        invalid_token:   token was never issued by this service
        invalid_client:  POST /auth with unknown client or wrong secret
    HTTP:  401 Unauthorized, with a WWW-Authenticate: Bearer header
    """

    status_code = 401

    def __init__(
        self,
        message: str = "A valid bearer token is required",
        code: str = "invalid_token",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.code = code


class NotFoundError(TodoServiceError):
    """
    Raised when a requested resource does not exist.

    When:  GET/PUT/PATCH/DELETE /todos/{id} with an unknown id.
    HTTP:  404 Not Found
    """

    code = "not_found"
    status_code = 404

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class StoreError(TodoServiceError):
    """
    Raised when the backing store fails unexpectedly.

    HTTP:  500 Internal Server Error. The client only sees a generic
           message; the context (original error type) is logged.
    """

    def __init__(
        self,
        message: str = "A storage error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
