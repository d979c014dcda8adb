"""
Student Registry Backend: Student SQLAlchemy Model
====================================================

What:  ORM model representing the `students` table in the SQLite store.
How:   Inherits from the shared DeclarativeBase; `Database.create_schema()`
       creates the table on first startup.
Who:   Used by StudentService to build parameterized SELECT/INSERT/UPDATE/DELETE
       statements.

Table Design:
    - INTEGER PRIMARY KEY AUTOINCREMENT: ids of deleted rows are never reused
    - firstname / lastname: NOT NULL; emptiness is rejected by the validator
    - gender / age: nullable, stored as submitted
"""

from typing import Optional

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from student_registry.database import Base


class Student(Base):
    """
    A single student record.

    Lifecycle:
        created by POST /students, fully replaced by PUT /student/{id},
        removed by DELETE /student/{id}. No soft delete, no versioning.
    """

    __tablename__ = "students"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    firstname: Mapped[str] = mapped_column(Text, nullable=False)
    lastname: Mapped[str] = mapped_column(Text, nullable=False)
    gender: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)
    age: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, default=None)

    def __repr__(self) -> str:
        return (
            f"<Student(id={self.id}, firstname='{self.firstname}', "
            f"lastname='{self.lastname}')>"
        )
