"""Database infrastructure for the finance engine.

This module exposes concrete helpers to create and reuse the SQLAlchemy
engine holding persisted snapshots. It belongs to the infrastructure layer
because it deals with external systems (PostgreSQL, SQLite).
"""

import os
from typing import Optional

import dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import QueuePool

from monifly.application.ports.database import DatabaseEnginePort


def _get_env_var(name: str) -> str:
    """Read an environment variable or raise a descriptive error.

    Args:
        name: Name of the environment variable to read.

    Returns:
        str: The raw value of the environment variable.

    Raises:
        RuntimeError: If the environment variable is missing or empty.
    """
    dotenv.load_dotenv()
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing environment variable: {name}")
    return value


def _create_engine(db_url: str) -> Engine:
    """Create a configured SQLAlchemy engine.

    Args:
        db_url: Fully qualified database URL (including driver and credentials)

    Returns:
        Engine: A SQLAlchemy engine with health checks enabled. Server
        databases get a small connection pool; SQLite keeps its default.
    """
    if db_url.startswith("sqlite"):
        return create_engine(db_url, pool_pre_ping=True, future=True)
    return create_engine(
        db_url,
        poolclass=QueuePool,
        pool_size=5,
        max_overflow=5,
        pool_pre_ping=True,
        future=True,
    )


_engine: Optional[Engine] = None


def get_engine() -> Engine:
    """Get a singleton SQLAlchemy engine for the snapshot database.

    Returns:
        Engine: Lazily initialized engine connected to ``MONIFLY_DB_URL``.
    """
    global _engine
    if _engine is None:
        db_url = _get_env_var("MONIFLY_DB_URL")
        _engine = _create_engine(db_url)
    return _engine


class SqlAlchemyDatabaseEngineAdapter(DatabaseEnginePort):
    """DatabaseEnginePort implementation backed by SQLAlchemy engines.

    The adapter hides configuration details (environment variables, pooling)
    behind the port so application code can depend only on the protocol.
    An explicit URL gives the adapter its own engine instead of the shared
    one.
    """

    def __init__(self, db_url: str | None = None) -> None:
        self._db_url = db_url
        self._engine: Optional[Engine] = None

    def get_engine(self) -> Engine:
        """Get the engine for the snapshot database.

        Returns:
            Engine: SQLAlchemy engine connected to the configured database.
        """
        if self._db_url is None:
            return get_engine()
        if self._engine is None:
            self._engine = _create_engine(self._db_url)
        return self._engine


__all__ = ["get_engine", "SqlAlchemyDatabaseEngineAdapter"]
