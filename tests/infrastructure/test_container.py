"""Tests for the composition root."""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from monifly.domain.services.fx import RateTable
from monifly.infrastructure import container
from monifly.infrastructure.settings import EngineSettings
from monifly.infrastructure.snapshot_repository import (
    JsonFileSnapshotRepository,
    SqlAlchemySnapshotRepository,
)


@pytest.fixture(autouse=True)
def fake_logger(monkeypatch):
    logger = MagicMock()
    monkeypatch.setattr(container, "get_app_logger", lambda: logger)
    return logger


def test_build_snapshot_repository_json(tmp_path):
    settings = EngineSettings(storage="json", snapshot_file=tmp_path / "book.json")

    repository = container.build_snapshot_repository(settings)

    assert isinstance(repository, JsonFileSnapshotRepository)
    assert repository.path == tmp_path / "book.json"


def test_build_snapshot_repository_sqlalchemy_uses_given_port():
    settings = EngineSettings(storage="sqlalchemy", db_url="sqlite://")

    repository = container.build_snapshot_repository(settings, db_port=MagicMock())

    assert isinstance(repository, SqlAlchemySnapshotRepository)


def test_build_snapshot_repository_rejects_unknown_backend():
    with pytest.raises(RuntimeError):
        container.build_snapshot_repository(EngineSettings(storage="redis"))


def test_build_store_starts_empty_book_with_configured_currency():
    """A book with no snapshot starts empty in the configured currency."""
    repository = MagicMock()
    repository.load.return_value = None
    settings = EngineSettings(book_id="home", display_currency="EUR", week_start=6)

    store = container.build_store(settings, repository=repository)

    repository.load.assert_called_once_with("home")
    assert store.state.wallets == ()
    assert store.state.settings.primary_display_currency == "EUR"
    assert store.resolver.week_start == 6


def test_build_store_loads_stored_snapshot_with_injected_rates(tmp_path):
    settings = EngineSettings(storage="json", snapshot_file=tmp_path / "book.json")
    repository = container.build_snapshot_repository(settings)
    first = container.build_store(settings, repository=repository)
    container.attach_autosave(first, repository, settings.book_id)
    first.add_wallet("Euro", "EUR", 100)

    second = container.build_store(
        settings,
        repository=repository,
        rate_table=RateTable.from_pivot({"EUR": "2"}),
    )

    assert [wallet.name for wallet in second.state.wallets] == ["Euro"]
    assert second.get_overview().total_balance == Decimal("200.00")


def test_attach_autosave_saves_after_each_command_until_unsubscribed():
    repository = MagicMock()
    repository.load.return_value = None
    store = container.build_store(EngineSettings(), repository=repository)

    unsubscribe = container.attach_autosave(store, repository, "default")
    store.add_wallet("Cash", "USD", 10)
    unsubscribe()
    store.add_wallet("Bank", "USD", 10)

    repository.save.assert_called_once()
    book_id, document = repository.save.call_args.args
    assert book_id == "default"
    assert [row["name"] for row in document["wallets"]] == ["Cash"]


def test_failed_autosave_keeps_command_applied(fake_logger):
    repository = MagicMock()
    repository.load.return_value = None
    repository.save.side_effect = OSError("read-only file system")
    store = container.build_store(EngineSettings(), repository=repository)
    container.attach_autosave(store, repository, "default")

    wallet_id = store.add_wallet("Cash", "USD", 10)

    assert store.get_wallet_by_id(wallet_id).balance == Decimal("10")
    repository.save.assert_called_once()
    fake_logger.error.assert_called_once()
