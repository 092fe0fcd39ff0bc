# Middleware package init
"""
Bookstore Backend — Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: correlation id, stored in a ContextVar for loggers and
       the error handlers, echoed as X-Request-ID
    2. Logging: one access line per request with status and duration
"""
