# Middleware package init
"""
Student Registry Backend: Middleware Package
==============================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

Responses travel back in reverse order, so the logging middleware sees the
final status code and the request ID middleware sets X-Request-ID last.
"""
