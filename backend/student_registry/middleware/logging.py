"""
Student Registry Backend: Access Log Middleware
=================================================

What:  One access-log line per HTTP request on `student_registry.access`.
How:   Times the downstream call, then reads the matched route's path
       parameters so lines for /student/{id} carry the student id they
       touched, e.g.

           PUT /student/7 -> 404 in 2.1ms student=7 [a1b2c3d4]

When:  Inside RequestIDMiddleware, so the request ID is already set.

Request bodies are not logged here; the body decoder logs them at DEBUG.
"""

import logging
import time
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from student_registry.middleware.request_id import request_id_var

logger = logging.getLogger("student_registry.access")

# Hit every few seconds by container health checks
UNLOGGED_PATHS = {"/health"}


def access_level(status: int) -> int:
    """5xx → ERROR, 4xx → WARNING, everything else → INFO."""
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def _student_id(request: Request) -> Optional[str]:
    # The router fills path_params on the shared scope during call_next
    return request.scope.get("path_params", {}).get("student_id")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access log for the student routes; /health is left out."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in UNLOGGED_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        rid = request_id_var.get("")
        student_id = _student_id(request)
        target = f" student={student_id}" if student_id is not None else ""

        logger.log(
            access_level(response.status_code),
            "%s %s -> %d in %.1fms%s [%s]",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            target,
            rid,
            extra={
                "request_id": rid,
                "student_id": student_id,
                "status": response.status_code,
                "duration_ms": round(elapsed_ms, 2),
                "client_ip": request.client.host if request.client else None,
            },
        )
        return response
