# Middleware package init
"""
Foods API Backend — Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Rate Limit] → [Request ID] → [Access Log] → [GZip] → [CORS] → Route

    - Rate Limit rejects over-quota clients before any other work
    - Request ID stores a correlation ID that the access log and the
      exception handlers read
    - Access Log records status and duration once the response exists
"""
