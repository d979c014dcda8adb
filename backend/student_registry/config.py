"""
Student Registry Backend: Application Configuration
=====================================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by the application factory, the database layer and middleware.
When:  Loaded once at module import time. Tests build their own `Settings`
       instance and pass it to `create_app()`.
"""

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import List


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have defaults suitable for local development: the store is
    a SQLite file next to the working directory.
    """

    # ── Database ──────────────────────────────────────────────────────────
    # Format: sqlite+aiosqlite:///<path>; the file is created on first startup
    database_url: str = Field(
        default="sqlite+aiosqlite:///./students.sqlite",
        description="Async SQLAlchemy URL of the single-file student store",
    )

    # Seconds a writer waits on SQLite's file lock before failing
    db_busy_timeout: float = Field(default=5.0, ge=0, le=60)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Comma-separated origins, parsed by cors_origins_list
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    # DEBUG also echoes every SQL statement through sqlalchemy.engine
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # DATABASE_URL and database_url both work
        "extra": "ignore",
    }

    @property
    def sql_echo(self) -> bool:
        return self.log_level == "DEBUG"


# Singleton instance used when create_app() is called without explicit settings
settings = Settings()
