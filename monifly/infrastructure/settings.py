"""Settings helpers for infrastructure adapters."""

from dataclasses import dataclass
import os
from pathlib import Path
from urllib.parse import unquote, urlparse

import dotenv

from monifly.domain.constants import DEFAULT_DISPLAY_CURRENCY
from monifly.infrastructure.logging.logger import get_app_logger
from monifly.utils.utils import get_project_root


DEFAULT_BOOK_ID = "default"
DEFAULT_SNAPSHOT_FILE = Path("data") / "monifly.json"


@dataclass(frozen=True)
class EngineSettings:
    """Settings for storage and display defaults.

    Attributes:
        storage: Snapshot backend identifier (sqlalchemy or json).
        db_url: Optional SQLAlchemy URL for the sqlalchemy backend.
        snapshot_file: Path of the JSON snapshot for the json backend.
        book_id: Identifier of the stored snapshot.
        display_currency: Display currency for a fresh book.
        week_start: First day of the week, 0=Monday .. 6=Sunday.
    """

    storage: str = "json"
    db_url: str | None = None
    snapshot_file: Path = DEFAULT_SNAPSHOT_FILE
    book_id: str = DEFAULT_BOOK_ID
    display_currency: str = DEFAULT_DISPLAY_CURRENCY
    week_start: int = 0

    @classmethod
    def from_env(cls) -> "EngineSettings":
        """Build settings from environment variables and ``.env``.

        Returns:
            EngineSettings: Settings sourced from environment variables.
        """
        dotenv.load_dotenv()
        logger = get_app_logger()
        storage = os.getenv("MONIFLY_STORAGE", "json").strip().lower()
        raw_file = os.getenv("MONIFLY_SNAPSHOT_FILE")
        snapshot_file = (
            cls._normalize_path(raw_file)
            if raw_file
            else get_project_root() / DEFAULT_SNAPSHOT_FILE
        )
        return cls(
            storage=storage,
            db_url=os.getenv("MONIFLY_DB_URL") or None,
            snapshot_file=snapshot_file,
            book_id=os.getenv("MONIFLY_BOOK_ID", DEFAULT_BOOK_ID).strip()
            or DEFAULT_BOOK_ID,
            display_currency=os.getenv(
                "MONIFLY_DISPLAY_CURRENCY",
                DEFAULT_DISPLAY_CURRENCY,
            )
            .strip()
            .upper()
            or DEFAULT_DISPLAY_CURRENCY,
            week_start=cls._parse_week_start(
                os.getenv("MONIFLY_WEEK_START"),
                logger=logger,
            ),
        )

    @staticmethod
    def _normalize_path(raw_path: str) -> Path:
        """Normalize a snapshot path or ``file://`` URI.

        Args:
            raw_path: Raw file path string.

        Returns:
            Path: Absolute filesystem path.
        """
        parsed = urlparse(raw_path)
        if parsed.scheme == "file":
            raw_path = unquote(parsed.path)
        return Path(raw_path).expanduser().resolve()

    @staticmethod
    def _parse_week_start(raw: str | None, logger) -> int:
        if raw is None or not raw.strip():
            return 0
        try:
            value = int(raw)
        except ValueError:
            logger.warning(f"Ignoring non-numeric MONIFLY_WEEK_START: {raw}")
            return 0
        if not 0 <= value <= 6:
            logger.warning(f"Ignoring out-of-range MONIFLY_WEEK_START: {raw}")
            return 0
        return value


__all__ = ["EngineSettings", "DEFAULT_BOOK_ID", "DEFAULT_SNAPSHOT_FILE"]
