"""Infrastructure adapters persisting finance snapshots."""

from datetime import datetime, timezone
import json
from pathlib import Path
from typing import Any

from sqlalchemy import text

from monifly.application.ports.database import DatabaseEnginePort
from monifly.application.ports.snapshot_repository import SnapshotRepositoryPort
from monifly.infrastructure.logging.logger import get_app_logger


CREATE_SNAPSHOTS_SQL = """
CREATE TABLE IF NOT EXISTS finance_snapshots (
    book_id VARCHAR(64) PRIMARY KEY,
    document TEXT NOT NULL,
    updated_at VARCHAR(40) NOT NULL
)
"""

SELECT_SNAPSHOT_SQL = text(
    """
    SELECT document
    FROM finance_snapshots
    WHERE book_id = :book_id
    """
)

DELETE_SNAPSHOT_SQL = text(
    """
    DELETE FROM finance_snapshots
    WHERE book_id = :book_id
    """
)

INSERT_SNAPSHOT_SQL = text(
    """
    INSERT INTO finance_snapshots (book_id, document, updated_at)
    VALUES (:book_id, :document, :updated_at)
    """
)


class SqlAlchemySnapshotRepository(SnapshotRepositoryPort):
    """Snapshot storage with one JSON row per book."""

    def __init__(self, db_port: DatabaseEnginePort, logger=None) -> None:
        """Initialize the repository.

        Args:
            db_port: Port providing access to the snapshot engine.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._db_port = db_port
        self._logger = logger or get_app_logger()
        self._schema_ready = False

    def prepare_destination(self) -> None:
        """Ensure the snapshot table exists."""
        if self._schema_ready:
            return
        engine = self._db_port.get_engine()
        with engine.begin() as conn:
            conn.exec_driver_sql(CREATE_SNAPSHOTS_SQL)
        self._schema_ready = True

    def load(self, book_id: str) -> dict[str, Any] | None:
        """Return the stored document for a book.

        Returns:
            dict[str, Any] | None: Parsed document, or None when absent.
        """
        self.prepare_destination()
        engine = self._db_port.get_engine()
        with engine.connect() as conn:
            row = conn.execute(SELECT_SNAPSHOT_SQL, {"book_id": book_id}).first()
        if row is None:
            return None
        return json.loads(row.document)

    def save(self, book_id: str, document: dict[str, Any]) -> None:
        """Replace the stored document for a book in one transaction."""
        self.prepare_destination()
        payload = {
            "book_id": book_id,
            "document": json.dumps(document, sort_keys=True),
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        engine = self._db_port.get_engine()
        with engine.begin() as conn:
            conn.execute(DELETE_SNAPSHOT_SQL, {"book_id": book_id})
            conn.execute(INSERT_SNAPSHOT_SQL, payload)
        self._logger.info(
            f"Snapshot for book {book_id} written ({len(payload['document'])} bytes)"
        )


class JsonFileSnapshotRepository(SnapshotRepositoryPort):
    """Snapshot storage in a JSON file keyed by book id."""

    def __init__(self, path: Path | str, logger=None) -> None:
        self._path = Path(path)
        self._logger = logger or get_app_logger()

    @property
    def path(self) -> Path:
        return self._path

    def load(self, book_id: str) -> dict[str, Any] | None:
        return self._read_books().get(book_id)

    def save(self, book_id: str, document: dict[str, Any]) -> None:
        """Write the document, replacing the file atomically."""
        books = self._read_books()
        books[book_id] = document
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(
            json.dumps(books, indent=2, sort_keys=True),
            encoding="utf-8",
        )
        tmp_path.replace(self._path)
        self._logger.info(f"Snapshot for book {book_id} written to {self._path}")

    def _read_books(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        return json.loads(self._path.read_text(encoding="utf-8"))


__all__ = [
    "SqlAlchemySnapshotRepository",
    "JsonFileSnapshotRepository",
    "CREATE_SNAPSHOTS_SQL",
]
