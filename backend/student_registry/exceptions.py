"""
Student Registry Backend: Custom Exception Hierarchy
======================================================

What:  Application-specific exceptions for the three ways a request can fail.
How:   Each exception carries a user-facing message and an optional context
       dict. Global exception handlers (registered in main.py) catch these
       and return `{"error": <message>}` JSON bodies with the right status.
Who:   Raised by the input decoder and StudentService; caught by global handlers.

Exception Hierarchy:
    StudentRegistryError (base)  → 500 Internal Server Error
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── NotFoundError            → 404 Not Found
    └── InternalError            → 500 Internal Server Error (store failure)
"""

from typing import Any, Dict, Optional


class StudentRegistryError(Exception):
    """
    Base exception for all Student Registry application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(StudentRegistryError):
    """
    Raised when client input fails validation.

    When:    Missing firstname/lastname, an age that is not an integer,
             a body that cannot be decoded.
    HTTP:    400 Bad Request
    """

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


class NotFoundError(StudentRegistryError):
    """
    Raised when no row matches the requested id.

    When:    GET, PUT or DELETE on /student/{id} for an id with no row,
             including ids that are not integers at all.
    HTTP:    404 Not Found

    SQLAlchemy reports a missing row as None (select) or a zero rowcount
    (update/delete); the service layer converts both into this exception.
    """

    def __init__(
        self,
        resource: str = "Student",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource.lower()} was not found"
        if resource_id is not None:
            message = f"{resource} with id {resource_id} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource_id = resource_id


class InternalError(StudentRegistryError):
    """
    Raised when a store operation fails.

    When:    The SQLite file is unreadable, locked past the busy timeout,
             or a statement fails for any other driver-level reason.
    HTTP:    500 Internal Server Error

    The message names the failed operation only. The driver error is kept in
    `context` for the server-side log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
