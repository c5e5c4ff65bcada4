"""
Todo Service - Middleware Package
==================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: correlation ID stored in a ContextVar and echoed back
       in the X-Request-ID response header
    2. Logging: one access line per request, tagged with the request ID
"""
