"""Tests for the snapshot repositories."""

import json
from unittest.mock import MagicMock

from monifly.infrastructure.db import SqlAlchemyDatabaseEngineAdapter
from monifly.infrastructure.snapshot_repository import (
    JsonFileSnapshotRepository,
    SqlAlchemySnapshotRepository,
)


DOCUMENT = {
    "version": 1,
    "wallets": [
        {"id": "w1", "name": "Cash", "currency": "USD", "balance": "12.50"}
    ],
}


def test_sqlalchemy_repository_round_trips_documents(tmp_path):
    """Documents are stored as one row per book in SQLite."""
    adapter = SqlAlchemyDatabaseEngineAdapter(f"sqlite:///{tmp_path / 'finance.db'}")
    logger = MagicMock()
    repository = SqlAlchemySnapshotRepository(adapter, logger=logger)

    assert repository.load("default") is None

    repository.save("default", DOCUMENT)
    repository.save("other", {"version": 1})

    assert repository.load("default") == DOCUMENT
    assert repository.load("other") == {"version": 1}
    assert logger.info.call_count == 2


def test_sqlalchemy_repository_replaces_existing_row(tmp_path):
    adapter = SqlAlchemyDatabaseEngineAdapter(f"sqlite:///{tmp_path / 'finance.db'}")
    repository = SqlAlchemySnapshotRepository(adapter, logger=MagicMock())

    repository.save("default", DOCUMENT)
    repository.save("default", {"version": 1, "wallets": []})

    assert repository.load("default") == {"version": 1, "wallets": []}


def test_prepare_destination_runs_ddl_once():
    """The snapshot table is created on first use only."""
    conn = MagicMock()
    engine = MagicMock()
    engine.begin.return_value.__enter__.return_value = conn
    db_port = MagicMock()
    db_port.get_engine.return_value = engine
    repository = SqlAlchemySnapshotRepository(db_port, logger=MagicMock())

    repository.prepare_destination()
    repository.prepare_destination()

    conn.exec_driver_sql.assert_called_once()
    assert "finance_snapshots" in conn.exec_driver_sql.call_args.args[0]


def test_json_repository_keeps_books_side_by_side(tmp_path):
    path = tmp_path / "nested" / "monifly.json"
    repository = JsonFileSnapshotRepository(path, logger=MagicMock())

    assert repository.load("default") is None

    repository.save("default", DOCUMENT)
    repository.save("other", {"version": 1})

    assert repository.path == path
    assert repository.load("default") == DOCUMENT
    assert set(json.loads(path.read_text(encoding="utf-8"))) == {"default", "other"}
    assert not path.with_suffix(".json.tmp").exists()
