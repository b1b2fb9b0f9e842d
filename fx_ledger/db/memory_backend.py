"""In-process rate store backed by a plain list."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Sequence

from fx_ledger.db.base_backend import BackendStrategy, PersistenceResult
from fx_ledger.ingestion.models import RateFilter, RateRecord
from fx_ledger.utils.date_range import DateRange


class InMemoryBackend(BackendStrategy):
    """Keeps rate records in memory; handy for tests and embedded use."""

    def __init__(self, rows: Iterable[RateRecord] = ()) -> None:
        self._rows: list[RateRecord] = []
        self._keys: set[tuple[str, str, date]] = set()
        self.insert_rates(list(rows))

    def ensure_schema(self) -> None:
        return None

    def insert_rates(self, rows: Sequence[RateRecord]) -> PersistenceResult:
        result = PersistenceResult()
        for row in rows:
            key = (row.base, row.quote, row.rate_date)
            if key in self._keys:
                result.skipped += 1
                continue
            self._keys.add(key)
            self._rows.append(row)
            result.inserted += 1
        return result

    def query_rates(self, rate_filter: RateFilter) -> list[RateRecord]:
        matches = [row for row in self._rows if rate_filter.matches(row)]
        return sorted(matches, key=lambda row: row.rate_date, reverse=True)

    def fetch_range(
        self,
        start: date | None = None,
        end: date | None = None,
    ) -> list[RateRecord]:
        window = DateRange(start, end)
        return sorted(
            (row for row in self._rows if window.contains(row.rate_date)),
            key=lambda row: row.rate_date,
        )

    def __len__(self) -> int:
        return len(self._rows)


__all__ = ["InMemoryBackend"]
