"""
Student Registry Backend: Request ID Middleware
=================================================

What:  Assigns a correlation ID to each incoming request and echoes it in the response.
How:   Reuses the client's X-Request-ID header or generates a short UUID,
       stores it in a ContextVar for loggers and exception handlers, and
       sets it on the response.
When:  Outermost middleware, so every log line of the request can carry the ID.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware that assigns a unique ID to each request for tracing.

    Behavior:
        1. Use X-Request-ID from the client when present
        2. Otherwise generate the first 8 characters of a UUID4
        3. Store in ContextVar and request.state
        4. Add to response headers
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
