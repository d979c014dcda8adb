"""
Student Registry Backend: Application Package Initializer
==========================================================

What: Marks the `student_registry` directory as a Python package.
Who:  Used implicitly by Python's import system and explicitly by pytest and uvicorn.

Architecture Note:
    The backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, body decoding
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Validation, statements, errors
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async engine on a SQLite file
    └─────────────────────────────────────┘

    Routes hand raw field mappings to services; services validate them,
    run one parameterized statement and return response models.
"""

__version__ = "1.0.0"
