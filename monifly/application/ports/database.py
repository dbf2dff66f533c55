"""Database ports for the finance engine.

This module defines the application-layer protocol for accessing the
database engine. Infrastructure implementations are expected to provide
concrete adapters that satisfy this port.
"""

from typing import Protocol

from sqlalchemy.engine import Engine


class DatabaseEnginePort(Protocol):
    """Port exposing the database engine used for snapshot storage."""

    def get_engine(self) -> Engine:
        """Get the engine for the snapshot database.

        Returns:
            Engine: SQLAlchemy engine connected to the configured URL.
        """


__all__ = ["DatabaseEnginePort"]
