"""
Student Registry Backend: Student Route Handlers
==================================================

What:  The five CRUD endpoints over the `students` table.
How:   Decodes the body (create/replace), delegates to StudentService,
       returns the response model. Errors are raised as application
       exceptions and formatted by the global handlers in main.py.

Route Map:
    GET    /students        list every student           200
    POST   /students        create a student             201
    GET    /student/{id}    fetch one student            200 / 404
    PUT    /student/{id}    replace all mutable fields   200 / 400 / 404
    DELETE /student/{id}    delete one student           200 / 404

The id path parameter is declared as `str`: ids that are not integers are
answered with 404 by the service instead of FastAPI's 422.
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from student_registry.database import get_db_session
from student_registry.routes.form_fields import read_student_fields
from student_registry.schemas.student import (
    ErrorResponse,
    MessageResponse,
    StudentCreatedResponse,
    StudentResponse,
)
from student_registry.services.student_service import student_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Students"])

_BODY_DESCRIPTION = (
    "Fields: firstname (required), lastname (required), gender, age. "
    "Sent as form-urlencoded, multipart form fields, or a JSON object."
)


@router.get(
    "/students",
    response_model=List[StudentResponse],
    responses={500: {"description": "Store error", "model": ErrorResponse}},
    summary="List all students",
)
async def list_students(
    db: AsyncSession = Depends(get_db_session),
) -> List[StudentResponse]:
    return await student_service.list_students(db)


@router.post(
    "/students",
    status_code=201,
    response_model=StudentCreatedResponse,
    responses={
        400: {"description": "Missing or invalid fields", "model": ErrorResponse},
        500: {"description": "Store error", "model": ErrorResponse},
    },
    summary="Create a student",
    description=_BODY_DESCRIPTION,
)
async def create_student(
    fields: Dict[str, Any] = Depends(read_student_fields),
    db: AsyncSession = Depends(get_db_session),
) -> StudentCreatedResponse:
    """Create a student and return the id SQLite assigned to it."""
    return await student_service.create_student(db, fields)


@router.get(
    "/student/{student_id}",
    response_model=StudentResponse,
    responses={
        404: {"description": "Student not found", "model": ErrorResponse},
        500: {"description": "Store error", "model": ErrorResponse},
    },
    summary="Get a single student by id",
)
async def get_student(
    student_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> StudentResponse:
    return await student_service.get_student(db, student_id)


@router.put(
    "/student/{student_id}",
    response_model=StudentResponse,
    responses={
        400: {"description": "Missing or invalid fields", "model": ErrorResponse},
        404: {"description": "Student not found", "model": ErrorResponse},
        500: {"description": "Store error", "model": ErrorResponse},
    },
    summary="Replace a student",
    description=_BODY_DESCRIPTION + " All four fields are overwritten; omitted optional fields become null.",
)
async def replace_student(
    student_id: str,
    fields: Dict[str, Any] = Depends(read_student_fields),
    db: AsyncSession = Depends(get_db_session),
) -> StudentResponse:
    """
    Overwrite a student and return the submitted values.

    The body echoes what was sent, not a fresh read of the row.
    """
    return await student_service.replace_student(db, student_id, fields)


@router.delete(
    "/student/{student_id}",
    response_model=MessageResponse,
    responses={
        404: {"description": "Student not found", "model": ErrorResponse},
        500: {"description": "Store error", "model": ErrorResponse},
    },
    summary="Delete a student",
)
async def delete_student(
    student_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await student_service.delete_student(db, student_id)
