# Middleware package init
"""
Snippet Manager Backend — Middleware Package
==============================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    The order is reversed for responses, so the logging middleware sees
    the final status code and the request ID header is added last.
"""
