"""
Student Registry Backend: Student Service (Business Logic)
===========================================================

What:  Validates student bodies and runs the one statement each endpoint needs.
How:   Builds parameterized SQLAlchemy statements against the `students` table,
       converts missing rows into NotFoundError and driver failures into
       InternalError.
Who:   Called by the route handlers in routes/students.py.

Statement per operation:
    list_students    SELECT ... FROM students ORDER BY id
    create_student   INSERT INTO students (...) VALUES (?, ?, ?, ?)  (via flush)
    get_student      SELECT ... WHERE id = ?
    replace_student  UPDATE students SET ... WHERE id = ?   (rowcount 0 → 404)
    delete_student   DELETE FROM students WHERE id = ?      (rowcount 0 → 404)

StudentService is stateless; the session is passed into every call.
"""

import logging
from typing import Any, List, Mapping

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from student_registry.exceptions import InternalError, NotFoundError, ValidationError
from student_registry.models.student import Student
from student_registry.schemas.student import (
    MessageResponse,
    StudentCreatedResponse,
    StudentResponse,
)
from student_registry.services.validation import (
    REQUIRED_NAMES_MESSAGE,
    parse_integer_text,
    validate_student_fields,
)

logger = logging.getLogger(__name__)

UPDATE_REQUIRED_NAMES_MESSAGE = "Firstname and Lastname are required for update"


def parse_student_id(raw_id: str) -> int:
    """
    Convert the path id to an integer.

    Only plain ASCII integers within SQLite's INTEGER range are ids; anything
    else ("abc", "1_0", "99999999999999999999") can never match a row, so it
    is reported as not found.
    """
    student_id = parse_integer_text(raw_id) if isinstance(raw_id, str) else None
    if student_id is None:
        raise NotFoundError(resource="Student", resource_id=str(raw_id))
    return student_id


class StudentService:
    """
    Business logic layer for student operations.

    Error Handling Strategy:
        SQLAlchemyError from any statement is logged and wrapped in
        InternalError carrying the operation's message. NotFoundError and
        ValidationError propagate unchanged.
    """

    async def list_students(self, db: AsyncSession) -> List[StudentResponse]:
        """Return every stored student, ordered by id."""
        try:
            result = await db.execute(select(Student).order_by(Student.id))
            students = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Error fetching students: %s", str(e))
            raise InternalError(
                message="Error fetching students from database",
                context={"error_type": type(e).__name__},
            )

        return [StudentResponse.model_validate(student) for student in students]

    async def create_student(
        self,
        db: AsyncSession,
        fields: Mapping[str, Any],
    ) -> StudentCreatedResponse:
        """
        Validate and insert a new student.

        Returns:
            StudentCreatedResponse with the id SQLite assigned

        Raises:
            ValidationError: Missing names or malformed age (nothing is written)
            InternalError: INSERT failed
        """
        student = validate_student_fields(fields, REQUIRED_NAMES_MESSAGE)

        row = Student(**student.model_dump())
        try:
            db.add(row)
            await db.flush()  # INSERT runs here; SQLite's last-insert id lands on row.id
            student_id = row.id
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Error inserting student: %s", str(e))
            raise InternalError(
                message="Error inserting student into database",
                context={"error_type": type(e).__name__},
            )

        logger.info("Student %d created", student_id)
        return StudentCreatedResponse(message="Student created successfully", id=student_id)

    async def get_student(self, db: AsyncSession, raw_id: str) -> StudentResponse:
        """
        Fetch one student.

        Raises:
            NotFoundError: No row has this id (→ 404)
            InternalError: SELECT failed (→ 500)
        """
        student_id = parse_student_id(raw_id)

        try:
            result = await db.execute(select(Student).where(Student.id == student_id))
            student = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Error fetching student %s: %s", raw_id, str(e))
            raise InternalError(
                message="Error fetching student from database",
                context={"student_id": raw_id, "error_type": type(e).__name__},
            )

        if student is None:
            raise NotFoundError(resource="Student", resource_id=raw_id)

        return StudentResponse.model_validate(student)

    async def replace_student(
        self,
        db: AsyncSession,
        raw_id: str,
        fields: Mapping[str, Any],
    ) -> StudentResponse:
        """
        Overwrite all four mutable fields of a student.

        The response echoes the submitted values (with the parsed age) rather
        than re-reading the row, so a concurrent writer landing between the
        UPDATE and the response is not reflected in it.

        Raises:
            NotFoundError: No row has this id, whatever the body contains
            ValidationError: Bad body for an existing row
            InternalError: UPDATE failed
        """
        student_id = parse_student_id(raw_id)

        try:
            student = validate_student_fields(fields, UPDATE_REQUIRED_NAMES_MESSAGE)
        except ValidationError:
            # An unknown id is reported as 404 even when the body is also bad
            if not await self._exists(db, student_id):
                raise NotFoundError(resource="Student", resource_id=raw_id)
            raise

        try:
            result = await db.execute(
                update(Student)
                .where(Student.id == student_id)
                .values(**student.model_dump())
                .execution_options(synchronize_session=False)
            )
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Error updating student %s: %s", raw_id, str(e))
            raise InternalError(
                message="Error updating student in database",
                context={"student_id": raw_id, "error_type": type(e).__name__},
            )

        if result.rowcount == 0:
            raise NotFoundError(resource="Student", resource_id=raw_id)

        logger.info("Student %d replaced", student_id)
        return StudentResponse(id=student_id, **student.model_dump())

    async def delete_student(self, db: AsyncSession, raw_id: str) -> MessageResponse:
        """
        Delete one student.

        Raises:
            NotFoundError: No row had this id
            InternalError: DELETE failed
        """
        student_id = parse_student_id(raw_id)

        try:
            result = await db.execute(
                delete(Student)
                .where(Student.id == student_id)
                .execution_options(synchronize_session=False)
            )
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Error deleting student %s: %s", raw_id, str(e))
            raise InternalError(
                message="Error deleting student from database",
                context={"student_id": raw_id, "error_type": type(e).__name__},
            )

        if result.rowcount == 0:
            raise NotFoundError(resource="Student", resource_id=raw_id)

        logger.info("Student %d deleted", student_id)
        return MessageResponse(message=f"The Student with id: {raw_id} has been deleted.")

    async def _exists(self, db: AsyncSession, student_id: int) -> bool:
        try:
            result = await db.execute(select(Student.id).where(Student.id == student_id))
        except SQLAlchemyError as e:
            logger.error("Error fetching student %s: %s", student_id, str(e))
            raise InternalError(
                message="Error fetching student from database",
                context={"student_id": student_id, "error_type": type(e).__name__},
            )
        return result.scalar_one_or_none() is not None


# ── Singleton Instance ────────────────────────────────────────────────────
student_service = StudentService()
