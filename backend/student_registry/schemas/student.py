"""
Student Registry Backend: Pydantic Request/Response Schemas
=============================================================

What:  Pydantic models defining the API contract.
How:   `StudentInput` is the validated shape of a create/replace body.
       Response models are used as `response_model` on the routes, which
       drives serialization and the OpenAPI docs.

Schemas are separate from the SQLAlchemy model so the API controls exactly
which fields it accepts and returns.
"""

from typing import Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Input Models: what the validator produces from a decoded body
# ══════════════════════════════════════════════════════════════════════════


class StudentInput(BaseModel):
    """
    The four mutable Student fields after validation.

    Built by `validate_student_fields()`; never parsed straight from the
    request, because missing names and malformed ages must produce 400
    responses with the service's own messages.
    """
    firstname: str = Field(min_length=1, description="Given name (required)")
    lastname: str = Field(min_length=1, description="Family name (required)")
    gender: Optional[str] = Field(default=None, description="Free-text gender (optional)")
    age: Optional[int] = Field(default=None, description="Age in years (optional)")


# ══════════════════════════════════════════════════════════════════════════
# Response Models: what the API returns to clients
# ══════════════════════════════════════════════════════════════════════════


class StudentResponse(BaseModel):
    """
    What:  Full representation of a student.
    Who:   Returned by GET /students (as array items), GET /student/{id}
           and PUT /student/{id}.
    """
    id: int = Field(description="Auto-assigned student identifier")
    firstname: str
    lastname: str
    gender: Optional[str] = None
    age: Optional[int] = None

    model_config = {"from_attributes": True}


class StudentCreatedResponse(BaseModel):
    """Returned by POST /students with HTTP 201 Created."""
    message: str = Field(default="Student created successfully")
    id: int = Field(description="Id assigned to the new student")


class MessageResponse(BaseModel):
    """Confirmation body, returned by DELETE /student/{id}."""
    message: str


# ══════════════════════════════════════════════════════════════════════════
# Error & Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  Error body shared by every failing endpoint.

    Example:
        {
            "error": "Student with id 42 not found",
            "request_id": "1b9d6bcd"
        }
    """
    error: str = Field(description="Human-readable error description")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and container health checks."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Store connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
