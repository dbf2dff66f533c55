"""Composition root for wiring infrastructure adapters."""

from collections.abc import Callable

from monifly.application.ports.database import DatabaseEnginePort
from monifly.application.ports.snapshot_repository import SnapshotRepositoryPort
from monifly.application.store import FinancialDomainStore, StoreChange
from monifly.application.use_cases.load_snapshot import (
    LoadSnapshotUseCase,
    SaveSnapshotUseCase,
)
from monifly.domain.models import FinancialState, Settings
from monifly.domain.services.fx import CurrencyConverter, RateTable
from monifly.domain.services.periods import PeriodResolver
from monifly.infrastructure.db import SqlAlchemyDatabaseEngineAdapter
from monifly.infrastructure.logging.logger import get_app_logger
from monifly.infrastructure.settings import EngineSettings
from monifly.infrastructure.snapshot_repository import (
    JsonFileSnapshotRepository,
    SqlAlchemySnapshotRepository,
)


def build_database_adapter(
    settings: EngineSettings | None = None,
) -> DatabaseEnginePort:
    """Return the database adapter instance."""
    resolved = settings or EngineSettings.from_env()
    return SqlAlchemyDatabaseEngineAdapter(resolved.db_url)


def build_snapshot_repository(
    settings: EngineSettings | None = None,
    db_port: DatabaseEnginePort | None = None,
) -> SnapshotRepositoryPort:
    """Return the configured snapshot repository."""
    resolved = settings or EngineSettings.from_env()
    if resolved.storage == "sqlalchemy":
        return SqlAlchemySnapshotRepository(
            db_port or build_database_adapter(resolved),
            logger=get_app_logger(),
        )
    if resolved.storage == "json":
        return JsonFileSnapshotRepository(
            resolved.snapshot_file,
            logger=get_app_logger(),
        )
    raise RuntimeError(f"Unsupported MONIFLY_STORAGE value: {resolved.storage}")


def build_converter(rate_table: RateTable | None = None) -> CurrencyConverter:
    """Return a converter over the injected or bundled rate table."""
    return CurrencyConverter(rate_table, logger=get_app_logger())


def build_period_resolver(
    settings: EngineSettings | None = None,
) -> PeriodResolver:
    resolved = settings or EngineSettings.from_env()
    return PeriodResolver(week_start=resolved.week_start)


def build_store(
    settings: EngineSettings | None = None,
    repository: SnapshotRepositoryPort | None = None,
    rate_table: RateTable | None = None,
) -> FinancialDomainStore:
    """Return a store loaded from the configured snapshot repository.

    A missing snapshot yields an empty book using the configured display
    currency.
    """
    resolved = settings or EngineSettings.from_env()
    resolved_repository = repository or build_snapshot_repository(resolved)
    state = LoadSnapshotUseCase(
        resolved_repository,
        logger=get_app_logger(),
    ).execute(resolved.book_id)
    store_kwargs = {
        "converter": build_converter(rate_table),
        "resolver": build_period_resolver(resolved),
        "logger": get_app_logger(),
    }
    if state is None:
        state = FinancialState(
            settings=Settings(primary_display_currency=resolved.display_currency)
        )
    store = FinancialDomainStore(state, **store_kwargs)
    store.audit_balances()
    return store


def attach_autosave(
    store: FinancialDomainStore,
    repository: SnapshotRepositoryPort,
    book_id: str,
) -> Callable[[], None]:
    """Persist the snapshot after every successful command.

    A failed save is logged by the store; the command itself stays applied.

    Returns:
        Callable[[], None]: Unsubscribe function stopping the autosave.
    """
    saver = SaveSnapshotUseCase(repository, logger=get_app_logger())

    def _save(change: StoreChange) -> None:
        saver.execute(book_id, change.state)

    return store.subscribe(_save)


__all__ = [
    "build_database_adapter",
    "build_snapshot_repository",
    "build_converter",
    "build_period_resolver",
    "build_store",
    "attach_autosave",
]
