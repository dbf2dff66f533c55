"""Port for persisting serialized finance snapshots."""

from typing import Any, Protocol


class SnapshotRepositoryPort(Protocol):
    """Port exposing load/save of one snapshot document per book."""

    def load(self, book_id: str) -> dict[str, Any] | None:
        """Return the stored document, or None when nothing was saved."""

    def save(self, book_id: str, document: dict[str, Any]) -> None:
        """Store the document, replacing any previous one for the book."""


__all__ = ["SnapshotRepositoryPort"]
