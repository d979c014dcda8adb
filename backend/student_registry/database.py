"""
Student Registry Backend: Database Lifecycle and Session Management
=====================================================================

What:  The `Database` resource (async engine + session factory), the ORM base
       class, and the FastAPI dependencies that hand sessions to handlers.
How:   The application lifespan creates one `Database`, creates the schema,
       stores the object on `app.state`, and disposes it on shutdown.
       Handlers receive sessions through `Depends(get_db_session)`; nothing
       reaches for a module-level engine.
Who:   main.py (lifecycle), route handlers (dependencies), health check (ping).

Concurrency:
    The engine pools aiosqlite connections. SQLite serializes writers on the
    file lock; `db_busy_timeout` bounds how long a writer waits for it.
    Each request uses its own session and runs a single statement.
"""

import logging
from typing import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from student_registry.config import Settings

logger = logging.getLogger(__name__)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    `Database.create_schema()` imports the models and creates every table
    registered on this metadata.
    """
    pass


class Database:
    """
    Process-wide handle on the student store.

    Lifecycle:
        1. Constructed at startup from Settings (no connection yet)
        2. create_schema() opens the first connection and runs CREATE TABLE IF NOT EXISTS
        3. session() / ping() serve requests
        4. close() disposes the pool at shutdown
    """

    def __init__(self, url: str, echo: bool = False, busy_timeout: float = 5.0):
        self.url = url
        self.engine: AsyncEngine = create_async_engine(
            url,
            echo=echo,
            pool_pre_ping=True,
            connect_args={"timeout": busy_timeout},
        )
        # expire_on_commit=False keeps ORM rows readable after commit
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.database_url,
            echo=settings.sql_echo,
            busy_timeout=settings.db_busy_timeout,
        )

    async def create_schema(self) -> None:
        """Create missing tables. Existing tables and rows are left untouched."""
        # Registers the students table on Base.metadata
        from student_registry.models import student  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Table 'students' is ready.")

    async def ping(self) -> bool:
        """Run SELECT 1; False when the store cannot be reached."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Database ping failed: %s", str(e))
            return False

    async def close(self) -> None:
        """Close every pooled connection."""
        await self.engine.dispose()
        logger.info("Database connection closed.")


# ── Dependencies ──────────────────────────────────────────────────────────
def get_database(request: Request) -> Database:
    """FastAPI dependency returning the Database opened by the lifespan."""
    return request.app.state.database


async def get_db_session(
    database: Database = Depends(get_database),
) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler (services commit their own writes)
        3. On error: rolls back anything left uncommitted
        4. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/students")
        async def list_students(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    async with database.session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
