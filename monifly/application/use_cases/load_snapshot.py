"""Use cases to load and save the persisted finance snapshot."""

from monifly.application.ports.snapshot_repository import SnapshotRepositoryPort
from monifly.application.serialization import (
    state_from_document,
    state_to_document,
)
from monifly.domain.models import FinancialState
from monifly.infrastructure.logging.logger import get_app_logger


class LoadSnapshotUseCase:
    """Read a book's snapshot through the repository port."""

    def __init__(self, repository: SnapshotRepositoryPort, logger=None) -> None:
        self._repository = repository
        self._logger = logger or get_app_logger()

    def execute(self, book_id: str) -> FinancialState | None:
        """Return the stored snapshot, or None when the book is empty."""
        document = self._repository.load(book_id)
        if document is None:
            self._logger.info(f"No snapshot stored for book {book_id}")
            return None
        state = state_from_document(document)
        self._logger.info(
            f"Loaded snapshot for book {book_id}: "
            f"{len(state.wallets)} wallets, "
            f"{len(state.transactions)} transactions"
        )
        return state


class SaveSnapshotUseCase:
    """Write a book's snapshot through the repository port."""

    def __init__(self, repository: SnapshotRepositoryPort, logger=None) -> None:
        self._repository = repository
        self._logger = logger or get_app_logger()

    def execute(self, book_id: str, state: FinancialState) -> None:
        self._repository.save(book_id, state_to_document(state))
        self._logger.info(f"Saved snapshot for book {book_id}")


__all__ = ["LoadSnapshotUseCase", "SaveSnapshotUseCase"]
