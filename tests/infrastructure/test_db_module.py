"""Tests for the infrastructure.db module."""

import pytest

from monifly.infrastructure import db as db_module


def test_get_env_var_reads_environment(monkeypatch):
    """_get_env_var should load .env and return the requested value."""
    monkeypatch.setattr(db_module.dotenv, "load_dotenv", lambda: None)
    monkeypatch.setenv("MONIFLY_DB_URL", "postgresql://finance")

    assert db_module._get_env_var("MONIFLY_DB_URL") == "postgresql://finance"


def test_get_env_var_raises_when_missing(monkeypatch):
    """Missing env vars should raise a RuntimeError."""
    monkeypatch.setattr(db_module.dotenv, "load_dotenv", lambda: None)
    monkeypatch.delenv("MONIFLY_DB_URL", raising=False)

    with pytest.raises(RuntimeError):
        db_module._get_env_var("MONIFLY_DB_URL")


def test_create_engine_pools_server_databases(monkeypatch):
    """Server URLs get a QueuePool with health checks."""
    captured = {}

    def fake_create_engine(db_url, **kwargs):
        captured["db_url"] = db_url
        captured["kwargs"] = kwargs
        return "engine"

    monkeypatch.setattr(db_module, "create_engine", fake_create_engine)

    assert db_module._create_engine("postgresql://finance") == "engine"
    assert captured["kwargs"]["poolclass"] is db_module.QueuePool
    assert captured["kwargs"]["pool_size"] == 5
    assert captured["kwargs"]["max_overflow"] == 5
    assert captured["kwargs"]["pool_pre_ping"] is True


def test_create_engine_keeps_sqlite_default_pool(monkeypatch):
    """SQLite URLs are created without an explicit pool class."""
    captured = {}

    def fake_create_engine(db_url, **kwargs):
        captured["kwargs"] = kwargs
        return "engine"

    monkeypatch.setattr(db_module, "create_engine", fake_create_engine)

    db_module._create_engine("sqlite:///finance.db")

    assert "poolclass" not in captured["kwargs"]
    assert captured["kwargs"]["future"] is True


def test_get_engine_caches_engine(monkeypatch):
    """get_engine should memoize the created engine."""
    monkeypatch.setattr(db_module, "_engine", None)
    created = []

    def fake_create_engine(url):
        created.append(url)
        return f"engine:{url}"

    monkeypatch.setattr(db_module, "_create_engine", fake_create_engine)
    monkeypatch.setattr(db_module.dotenv, "load_dotenv", lambda: None)
    monkeypatch.setenv("MONIFLY_DB_URL", "postgresql://finance")

    engine_one = db_module.get_engine()
    engine_two = db_module.get_engine()

    assert engine_one is engine_two
    assert created == ["postgresql://finance"]


def test_adapter_without_url_uses_shared_engine(monkeypatch):
    """The adapter proxies the module-level engine by default."""
    monkeypatch.setattr(db_module, "get_engine", lambda: "shared_engine")

    adapter = db_module.SqlAlchemyDatabaseEngineAdapter()

    assert adapter.get_engine() == "shared_engine"


def test_adapter_with_url_owns_its_engine(monkeypatch):
    """An explicit URL creates one engine per adapter."""
    created = []
    monkeypatch.setattr(
        db_module,
        "_create_engine",
        lambda url: created.append(url) or f"engine:{url}",
    )

    adapter = db_module.SqlAlchemyDatabaseEngineAdapter("sqlite:///a.db")

    assert adapter.get_engine() == "engine:sqlite:///a.db"
    assert adapter.get_engine() == "engine:sqlite:///a.db"
    assert created == ["sqlite:///a.db"]
