"""SQLite backend strategy implementation."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Sequence

from fx_ledger.db import DEFAULT_SQLITE_DB_PATH
from fx_ledger.db.base_backend import BackendStrategy, PersistenceResult
from fx_ledger.db.sqlite_manager import SQLiteManager
from fx_ledger.ingestion.models import RateFilter, RateRecord


class SQLiteBackend(BackendStrategy):
    """Backend strategy that stores rates in a local SQLite file."""

    def __init__(
        self,
        db_path: str | Path = DEFAULT_SQLITE_DB_PATH,
        *,
        manager: SQLiteManager | None = None,
    ) -> None:
        self.manager = manager or SQLiteManager(db_path)
        self.db_path = Path(self.manager.db_path)

    def ensure_schema(self) -> None:
        # ``SQLiteManager`` creates the table in its constructor.
        return None

    def insert_rates(self, rows: Sequence[RateRecord]) -> PersistenceResult:
        return self.manager.insert_rates(rows)

    def query_rates(self, rate_filter: RateFilter) -> list[RateRecord]:
        return self.manager.query_rates(rate_filter)

    def fetch_range(
        self,
        start: date | None = None,
        end: date | None = None,
    ) -> list[RateRecord]:
        return self.manager.fetch_range(start, end)

    def close(self) -> None:  # pragma: no cover - trivial delegator
        self.manager.close()


__all__ = ["SQLiteBackend"]
