"""Tests for EngineSettings."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from monifly.infrastructure import settings as settings_module
from monifly.infrastructure.settings import EngineSettings


ENV_VARS = (
    "MONIFLY_STORAGE",
    "MONIFLY_SNAPSHOT_FILE",
    "MONIFLY_DB_URL",
    "MONIFLY_BOOK_ID",
    "MONIFLY_DISPLAY_CURRENCY",
    "MONIFLY_WEEK_START",
)


@pytest.fixture
def fake_logger(monkeypatch):
    logger = MagicMock()
    monkeypatch.setattr(settings_module.dotenv, "load_dotenv", lambda: None)
    monkeypatch.setattr(settings_module, "get_app_logger", lambda: logger)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return logger


def test_from_env_defaults(monkeypatch, tmp_path, fake_logger):
    """Without variables the JSON backend under the project root is used."""
    monkeypatch.setattr(settings_module, "get_project_root", lambda: tmp_path)

    settings = EngineSettings.from_env()

    assert settings.storage == "json"
    assert settings.db_url is None
    assert settings.snapshot_file == tmp_path / "data" / "monifly.json"
    assert settings.book_id == "default"
    assert settings.display_currency == "USD"
    assert settings.week_start == 0


def test_from_env_reads_variables(monkeypatch, tmp_path, fake_logger):
    monkeypatch.setenv("MONIFLY_STORAGE", " SQLAlchemy ")
    monkeypatch.setenv("MONIFLY_DB_URL", "sqlite:///finance.db")
    monkeypatch.setenv("MONIFLY_SNAPSHOT_FILE", f"file://{tmp_path}/book.json")
    monkeypatch.setenv("MONIFLY_BOOK_ID", "household")
    monkeypatch.setenv("MONIFLY_DISPLAY_CURRENCY", "eur")
    monkeypatch.setenv("MONIFLY_WEEK_START", "6")

    settings = EngineSettings.from_env()

    assert settings.storage == "sqlalchemy"
    assert settings.db_url == "sqlite:///finance.db"
    assert settings.snapshot_file == (tmp_path / "book.json").resolve()
    assert settings.book_id == "household"
    assert settings.display_currency == "EUR"
    assert settings.week_start == 6


@pytest.mark.parametrize("raw", ["sunday", "9"])
def test_invalid_week_start_falls_back_to_monday(monkeypatch, fake_logger, raw):
    """Bad week starts are logged and replaced by Monday."""
    monkeypatch.setenv("MONIFLY_WEEK_START", raw)

    settings = EngineSettings.from_env()

    assert settings.week_start == 0
    fake_logger.warning.assert_called_once()


def test_plain_snapshot_path_is_expanded(monkeypatch, fake_logger):
    monkeypatch.setenv("MONIFLY_SNAPSHOT_FILE", "~/monifly/book.json")

    settings = EngineSettings.from_env()

    assert settings.snapshot_file == (
        Path("~/monifly/book.json").expanduser().resolve()
    )
